# skillbridge/api/mentorship.py
"""
Mentorship API Router
Requests and lifecycle transitions

Endpoints:
- POST /mentorships/ - Learner requests a mentor
- GET /mentorships/mine - Current user's mentorships
- GET /mentorships/{id} - One mentorship (parties only)
- POST /mentorships/{id}/accept | reject - Mentor answers a request
- POST /mentorships/{id}/pause | reactivate | flag | complete - Mentor actions
- POST /mentorships/{id}/learner-complete - Learner ends an active mentorship
- POST /mentorships/{id}/check-inactivity - Re-evaluate inactivity now
- GET /mentorships/{id}/history - Status log, newest first
- GET /mentorships/{id}/consistency - Mentee progress digest
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skillbridge.api.deps import domain_http_error, unwrap
from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.database import get_db
from skillbridge.models.user import User
from skillbridge.schemas.mentorship import (
    MentorCompleteBody,
    MentorshipRequestCreate,
    MentorshipResponse,
    OptionalReasonBody,
    ReasonBody,
    StatusHistoryResponse,
)
from skillbridge.services import activity_service, lifecycle_service
from skillbridge.services.errors import DomainError
from skillbridge.services.inactivity_service import get_inactivity_engine
from skillbridge.utils.security import get_current_user

router = APIRouter(prefix="/mentorships", tags=["mentorships"])


def _reason(body: Optional[OptionalReasonBody]) -> Optional[str]:
    return body.reason if body else None


def _get_own_mentorship(db: Session, mentorship_id: int, user: User):
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentorship not found")
    if user.id not in (mentorship.learner_id, mentorship.mentor_id) and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this mentorship")
    return mentorship


# ======================
# REQUESTS
# ======================
@router.post("/", response_model=MentorshipResponse, status_code=status.HTTP_201_CREATED)
def request_mentorship(
    body: MentorshipRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.request_mentorship(db, current_user.id, body.mentor_id, body.message))


@router.get("/mine", response_model=List[MentorshipResponse])
def list_my_mentorships(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role == "mentor":
        return mentorship_crud.get_mentorships_by_mentor(db, current_user.id)
    return mentorship_crud.get_mentorships_by_learner(db, current_user.id)


@router.get("/{mentorship_id}", response_model=MentorshipResponse)
def get_mentorship(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _get_own_mentorship(db, mentorship_id, current_user)


@router.post("/{mentorship_id}/accept", response_model=MentorshipResponse)
def accept_request(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.accept_request(db, mentorship_id, current_user.id))


@router.post("/{mentorship_id}/reject", response_model=MentorshipResponse)
def reject_request(
    mentorship_id: int,
    body: Optional[OptionalReasonBody] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.reject_request(db, mentorship_id, current_user.id, _reason(body)))


# ======================
# MENTOR ACTIONS
# ======================
@router.post("/{mentorship_id}/pause", response_model=MentorshipResponse)
def pause_mentorship(
    mentorship_id: int,
    body: ReasonBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.pause_by_mentor(db, mentorship_id, current_user.id, body.reason))


@router.post("/{mentorship_id}/reactivate", response_model=MentorshipResponse)
def reactivate_mentorship(
    mentorship_id: int,
    body: Optional[OptionalReasonBody] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.reactivate_by_mentor(db, mentorship_id, current_user.id, _reason(body)))


@router.post("/{mentorship_id}/flag", response_model=MentorshipResponse)
def flag_poor_commitment(
    mentorship_id: int,
    body: ReasonBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.flag_poor_commitment(db, mentorship_id, current_user.id, body.reason))


@router.post("/{mentorship_id}/complete", response_model=MentorshipResponse)
def complete_by_mentor(
    mentorship_id: int,
    body: MentorCompleteBody,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.complete_by_mentor(
        db, mentorship_id, current_user.id, body.completion_reason, body.reason
    ))


# ======================
# LEARNER ACTIONS
# ======================
@router.post("/{mentorship_id}/learner-complete", response_model=MentorshipResponse)
def complete_by_learner(
    mentorship_id: int,
    body: Optional[OptionalReasonBody] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.complete_by_learner(db, mentorship_id, current_user.id, _reason(body)))


# ======================
# ACCOUNTABILITY
# ======================
@router.post("/{mentorship_id}/check-inactivity", response_model=MentorshipResponse)
def check_inactivity(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Re-evaluate one mentorship on demand (e.g. when a dashboard loads)."""
    _get_own_mentorship(db, mentorship_id, current_user)
    return get_inactivity_engine().process_mentorship(db, mentorship_id)


@router.get("/{mentorship_id}/history", response_model=StatusHistoryResponse)
def get_status_history(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    entries = unwrap(lifecycle_service.get_status_history(db, mentorship_id, current_user.id))
    return {"mentorship_id": mentorship_id, "count": len(entries), "history": entries}


@router.get("/{mentorship_id}/consistency")
def get_consistency_summary(
    mentorship_id: int,
    days: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.get_learner_consistency_summary(db, mentorship_id, current_user.id, days_back=days)
    except DomainError as exc:
        raise domain_http_error(exc)
