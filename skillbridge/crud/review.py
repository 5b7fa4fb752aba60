# skillbridge/crud/review.py
"""
Rating CRUD Operations
Learner -> mentor reviews and mentor -> learner feedback
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from skillbridge.models.review import LearnerFeedback, MentorReview


def _check_rating(rating: int) -> None:
    if not (1 <= rating <= 5):
        raise ValueError("Rating must be between 1 and 5")


# ======================
# MENTOR REVIEWS
# ======================

def create_mentor_review(
    db: Session,
    mentorship_id: int,
    reviewer_id: int,
    mentor_id: int,
    rating: int,
) -> MentorReview:
    """
    Create a learner's rating of their mentor.

    Raises:
        ValueError: If rating is out of range
    """
    _check_rating(rating)
    review = MentorReview(
        mentorship_id=mentorship_id,
        reviewer_id=reviewer_id,
        mentor_id=mentor_id,
        rating=rating,
    )
    db.add(review)
    db.flush()
    return review


def get_mentor_review_by_mentorship(db: Session, mentorship_id: int) -> Optional[MentorReview]:
    return db.query(MentorReview).filter(MentorReview.mentorship_id == mentorship_id).first()


def get_mentor_ratings(db: Session, mentor_id: int) -> List[int]:
    rows = db.query(MentorReview.rating).filter(MentorReview.mentor_id == mentor_id).all()
    return [row[0] for row in rows]


def get_rating_distribution(db: Session, mentor_id: int) -> Dict[int, int]:
    """Count of each star value (1-5) received by a mentor."""
    rows = db.query(
        MentorReview.rating, func.count(MentorReview.id)
    ).filter(
        MentorReview.mentor_id == mentor_id
    ).group_by(MentorReview.rating).all()

    distribution = {stars: 0 for stars in range(1, 6)}
    for rating, count in rows:
        distribution[rating] = count
    return distribution


# ======================
# LEARNER FEEDBACK
# ======================

def create_learner_feedback(
    db: Session,
    mentorship_id: int,
    mentor_id: int,
    learner_id: int,
    rating: int,
) -> LearnerFeedback:
    _check_rating(rating)
    feedback = LearnerFeedback(
        mentorship_id=mentorship_id,
        mentor_id=mentor_id,
        learner_id=learner_id,
        rating=rating,
    )
    db.add(feedback)
    db.flush()
    return feedback


def get_learner_feedback_by_mentorship(db: Session, mentorship_id: int) -> Optional[LearnerFeedback]:
    return db.query(LearnerFeedback).filter(LearnerFeedback.mentorship_id == mentorship_id).first()


def get_learner_ratings(db: Session, learner_id: int) -> List[int]:
    rows = db.query(LearnerFeedback.rating).filter(LearnerFeedback.learner_id == learner_id).all()
    return [row[0] for row in rows]
