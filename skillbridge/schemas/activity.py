# skillbridge/schemas/activity.py
"""
Activity Pydantic Schemas
Goals, progress updates, weekly check-ins and timelines
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ======================
# GOALS
# ======================

class GoalCreate(BaseModel):
    mentorship_id: int
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)


class GoalStatusUpdate(BaseModel):
    status: Literal["active", "completed"]


class GoalResponse(BaseModel):
    id: int
    mentorship_id: int
    learner_id: int
    title: str
    description: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ======================
# PROGRESS UPDATES
# ======================

class ProgressUpdateCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class ProgressUpdateResponse(BaseModel):
    id: int
    goal_id: int
    learner_id: int
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ======================
# WEEKLY CHECK-INS
# ======================

class CheckInCreate(BaseModel):
    planned_tasks: List[str] = Field(..., min_length=1, max_length=10)
    completed_tasks: List[str] = Field(default_factory=list, max_length=10)
    blockers: Optional[str] = Field(None, max_length=500)
    week_start_date: Optional[date] = Field(
        None, description="Any day of an earlier week, for a late submission"
    )


class CheckInResponse(BaseModel):
    id: int
    goal_id: int
    learner_id: int
    mentorship_id: int
    week_start_date: datetime
    week_end_date: datetime
    planned_tasks: List[str]
    completed_tasks: List[str]
    blockers: Optional[str] = None
    submitted_at: datetime
    is_late: bool

    model_config = ConfigDict(from_attributes=True)


class TimelineWeek(BaseModel):
    week_start: datetime
    week_end: datetime
    status: Literal["submitted", "late", "missed", "current"]
    check_in: Optional[Dict[str, Any]] = None


class GoalTimelineResponse(BaseModel):
    goal: Dict[str, Any]
    timeline: List[TimelineWeek]
