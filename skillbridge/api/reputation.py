# skillbridge/api/reputation.py
"""
Reputation API Router
Mentor discovery with trust scores and learner reliability for mentors
"""

from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.database import get_db
from skillbridge.models.user import User, UserRole
from skillbridge.schemas.reputation import LearnerReliabilitySummary, MentorWithReputation
from skillbridge.services import reliability_service, reputation_service
from skillbridge.utils.security import get_current_user

router = APIRouter(prefix="/reputation", tags=["reputation"])


@router.get("/mentors", response_model=List[MentorWithReputation])
def list_mentors(
    sort_by: Literal["rating", "experience", "trust", "reviews", "newest"] = Query("rating"),
    only_available: bool = Query(False),
    db: Session = Depends(get_db)
):
    return reputation_service.list_mentors_with_reputation(db, sort_by=sort_by, only_available=only_available)


@router.get("/mentors/{mentor_id}", response_model=MentorWithReputation)
def get_mentor(mentor_id: int, db: Session = Depends(get_db)):
    result = reputation_service.get_mentor_profile_with_reputation(db, mentor_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentor profile not found")
    return result


@router.get("/learners/{learner_id}", response_model=LearnerReliabilitySummary)
def get_learner_reliability(
    learner_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Shown to mentors before they accept a request, and to the learner themselves."""
    if current_user.id != learner_id and current_user.role not in (UserRole.MENTOR, UserRole.ADMIN):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this learner")

    learner = mentorship_crud.get_user(db, learner_id)
    if learner is None or learner.role != UserRole.LEARNER:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Learner not found")
    return reliability_service.get_learner_reliability_summary(db, learner_id)
