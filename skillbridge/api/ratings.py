# skillbridge/api/ratings.py
"""
Ratings API Router

Endpoints:
- POST /ratings/mentor - Learner rates the mentor of a completed mentorship
- POST /ratings/learner - Mentor rates the learner of a completed mentorship
- GET /ratings/eligibility/{mentorship_id} - Can the current user rate?
- GET /ratings/mentor/{mentor_id}/stats - Anonymous mentor rating summary
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillbridge.api.deps import domain_http_error
from skillbridge.database import get_db
from skillbridge.models.user import User
from skillbridge.schemas.review import EligibilityResponse, MentorRatingStats, RatingCreate, RatingResponse
from skillbridge.services import review_service
from skillbridge.services.errors import DomainError
from skillbridge.utils.security import get_current_user

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("/mentor", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def rate_mentor(
    body: RatingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return review_service.submit_mentor_review(db, body.mentorship_id, current_user.id, body.rating)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.post("/learner", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
def rate_learner(
    body: RatingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return review_service.submit_learner_feedback(db, body.mentorship_id, current_user.id, body.rating)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.get("/eligibility/{mentorship_id}", response_model=EligibilityResponse)
def check_eligibility(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role == "mentor":
        can_rate, reason = review_service.can_give_feedback(db, mentorship_id, current_user.id)
    else:
        can_rate, reason = review_service.can_review_mentor(db, mentorship_id, current_user.id)
    return EligibilityResponse(mentorship_id=mentorship_id, can_rate=can_rate, reason=reason)


@router.get("/mentor/{mentor_id}/stats", response_model=MentorRatingStats)
def get_mentor_rating_stats(mentor_id: int, db: Session = Depends(get_db)):
    """Public: averages and distribution only, never individual reviewers."""
    try:
        return review_service.get_mentor_rating_stats(db, mentor_id)
    except DomainError as exc:
        raise domain_http_error(exc)
