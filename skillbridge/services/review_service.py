# skillbridge/services/review_service.py
"""
Review Service Layer
One rating in each direction per completed mentorship: the learner rates the
mentor (MentorReview) and the mentor rates the learner (LearnerFeedback).
Ratings are immutable and only ever shown to the rated party in aggregate.
"""

import logging
from typing import Any, Dict, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.crud import review as review_crud
from skillbridge.models.mentorship import Mentorship, MentorshipStatus
from skillbridge.models.review import LearnerFeedback, MentorReview
from skillbridge.services.errors import invalid_state, not_found, unauthorized, validation_failed
from skillbridge.services.reputation_service import average_rating

logger = logging.getLogger(__name__)


def _validate_rating(rating: int) -> None:
    if not isinstance(rating, int) or isinstance(rating, bool) or not (1 <= rating <= 5):
        raise validation_failed("Rating must be a whole number between 1 and 5")


def _completed_mentorship(db: Session, mentorship_id: int) -> Mentorship:
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        raise not_found("Mentorship")
    if mentorship.status != MentorshipStatus.COMPLETED:
        raise invalid_state("Ratings can only be left for a completed mentorship")
    return mentorship


# ======================
# ELIGIBILITY
# ======================

def can_review_mentor(db: Session, mentorship_id: int, learner_id: int) -> Tuple[bool, str]:
    """
    Check whether a learner may rate the mentor of a mentorship.

    Returns:
        Tuple of (can_review: bool, reason: str)
    """
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        return False, "Mentorship not found"
    if mentorship.learner_id != learner_id:
        return False, "Only the learner of this mentorship can rate the mentor"
    if mentorship.status != MentorshipStatus.COMPLETED:
        return False, "Mentorship is not completed yet"
    if review_crud.get_mentor_review_by_mentorship(db, mentorship_id):
        return False, "You have already rated this mentor"
    return True, "Eligible to review"


def can_give_feedback(db: Session, mentorship_id: int, mentor_id: int) -> Tuple[bool, str]:
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        return False, "Mentorship not found"
    if mentorship.mentor_id != mentor_id:
        return False, "Only the mentor of this mentorship can rate the learner"
    if mentorship.status != MentorshipStatus.COMPLETED:
        return False, "Mentorship is not completed yet"
    if review_crud.get_learner_feedback_by_mentorship(db, mentorship_id):
        return False, "You have already rated this learner"
    return True, "Eligible to give feedback"


# ======================
# SUBMISSION
# ======================

def submit_mentor_review(db: Session, mentorship_id: int, learner_id: int, rating: int) -> MentorReview:
    """
    Learner rates their mentor once the mentorship is completed.

    Raises:
        DomainError: NOT_FOUND, UNAUTHORIZED, INVALID_STATE, or
            VALIDATION_FAILED for an out-of-range or second rating
    """
    mentorship = _completed_mentorship(db, mentorship_id)
    if mentorship.learner_id != learner_id:
        raise unauthorized("Only the learner of this mentorship can rate the mentor")
    _validate_rating(rating)
    if review_crud.get_mentor_review_by_mentorship(db, mentorship_id):
        raise validation_failed("You have already rated this mentor")

    try:
        review = review_crud.create_mentor_review(
            db,
            mentorship_id=mentorship_id,
            reviewer_id=learner_id,
            mentor_id=mentorship.mentor_id,
            rating=rating,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise validation_failed("You have already rated this mentor") from None
    except Exception:
        db.rollback()
        raise

    db.refresh(review)
    logger.info("Mentor %s received a review for mentorship %s", mentorship.mentor_id, mentorship_id)
    return review


def submit_learner_feedback(db: Session, mentorship_id: int, mentor_id: int, rating: int) -> LearnerFeedback:
    mentorship = _completed_mentorship(db, mentorship_id)
    if mentorship.mentor_id != mentor_id:
        raise unauthorized("Only the mentor of this mentorship can rate the learner")
    _validate_rating(rating)
    if review_crud.get_learner_feedback_by_mentorship(db, mentorship_id):
        raise validation_failed("You have already rated this learner")

    try:
        feedback = review_crud.create_learner_feedback(
            db,
            mentorship_id=mentorship_id,
            mentor_id=mentor_id,
            learner_id=mentorship.learner_id,
            rating=rating,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise validation_failed("You have already rated this learner") from None
    except Exception:
        db.rollback()
        raise

    db.refresh(feedback)
    logger.info("Learner %s received feedback for mentorship %s", mentorship.learner_id, mentorship_id)
    return feedback


# ======================
# AGGREGATES
# ======================

def get_mentor_rating_stats(db: Session, mentor_id: int) -> Dict[str, Any]:
    """Anonymous rating aggregate for a mentor: no reviewer ids are exposed."""
    if mentorship_crud.get_user(db, mentor_id) is None:
        raise not_found("Mentor")
    ratings = review_crud.get_mentor_ratings(db, mentor_id)
    return {
        "mentor_id": mentor_id,
        "average_rating": average_rating(ratings),
        "total_reviews": len(ratings),
        "rating_distribution": review_crud.get_rating_distribution(db, mentor_id),
    }

