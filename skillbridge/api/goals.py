# skillbridge/api/goals.py
"""
Goals API Router
Goals, progress updates, weekly check-ins and goal timelines
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from skillbridge.api.deps import domain_http_error
from skillbridge.database import get_db
from skillbridge.models.user import User
from skillbridge.schemas.activity import (
    CheckInCreate,
    CheckInResponse,
    GoalCreate,
    GoalResponse,
    GoalStatusUpdate,
    GoalTimelineResponse,
    ProgressUpdateCreate,
    ProgressUpdateResponse,
)
from skillbridge.services import activity_service
from skillbridge.services.errors import DomainError
from skillbridge.utils.security import get_current_user

router = APIRouter(prefix="/goals", tags=["goals"])


# ======================
# GOALS
# ======================
@router.post("/", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    body: GoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.create_goal(db, body.mentorship_id, current_user.id, body.title, body.description)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.get("/mentorship/{mentorship_id}", response_model=List[GoalResponse])
def list_goals(
    mentorship_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.list_goals(db, mentorship_id, current_user.id)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.patch("/{goal_id}/status", response_model=GoalResponse)
def update_goal_status(
    goal_id: int,
    body: GoalStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.update_goal_status(db, goal_id, current_user.id, body.status)
    except DomainError as exc:
        raise domain_http_error(exc)


# ======================
# PROGRESS UPDATES
# ======================
@router.post("/{goal_id}/progress", response_model=ProgressUpdateResponse, status_code=status.HTTP_201_CREATED)
def add_progress_update(
    goal_id: int,
    body: ProgressUpdateCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.add_progress_update(db, goal_id, current_user.id, body.content)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.get("/{goal_id}/progress", response_model=List[ProgressUpdateResponse])
def list_progress_updates(
    goal_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.list_progress_updates(db, goal_id, current_user.id)
    except DomainError as exc:
        raise domain_http_error(exc)


# ======================
# WEEKLY CHECK-INS
# ======================
@router.post("/{goal_id}/check-ins", response_model=CheckInResponse, status_code=status.HTTP_201_CREATED)
def submit_check_in(
    goal_id: int,
    body: CheckInCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit the weekly check-in for a goal.

    Omit week_start_date for the current week; pass any day of an earlier
    week to submit late (the check-in is then marked is_late).
    """
    try:
        return activity_service.submit_check_in(
            db,
            goal_id,
            current_user.id,
            planned_tasks=body.planned_tasks,
            completed_tasks=body.completed_tasks,
            blockers=body.blockers,
            week_start_date=body.week_start_date,
        )
    except DomainError as exc:
        raise domain_http_error(exc)


@router.get("/{goal_id}/check-ins", response_model=List[CheckInResponse])
def list_check_ins(
    goal_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.list_check_ins_for_goal(db, goal_id, current_user.id)
    except DomainError as exc:
        raise domain_http_error(exc)


@router.get("/{goal_id}/timeline", response_model=GoalTimelineResponse)
def get_goal_timeline(
    goal_id: int,
    weeks: int = Query(12, ge=1, le=52),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return activity_service.get_goal_timeline(db, goal_id, current_user.id, weeks_back=weeks)
    except DomainError as exc:
        raise domain_http_error(exc)
