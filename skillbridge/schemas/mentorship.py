# skillbridge/schemas/mentorship.py
"""
Mentorship Pydantic Schemas
Requests, lifecycle actions and status history
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skillbridge.models.mentorship import CompletionReason, MentorshipStatus, TriggeredBy
from skillbridge.services.status_log import MAX_ADMIN_REASON_LENGTH, MAX_REASON_LENGTH


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and value.strip() == "":
        raise ValueError("Reason cannot be empty or just whitespace")
    return value.strip() if value else value


# ======================
# REQUESTS
# ======================

class MentorshipRequestCreate(BaseModel):
    mentor_id: int = Field(..., description="Mentor user ID")
    message: str = Field("", max_length=300, description="Note to the mentor (max 300 chars)")


class ReasonBody(BaseModel):
    """Body for actions that require a reason"""
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v):
        return _not_blank(v)


class AdminReasonBody(ReasonBody):
    """Admin reasons are stored behind an "Admin action: " prefix"""
    reason: str = Field(..., min_length=1, max_length=MAX_ADMIN_REASON_LENGTH)


class OptionalReasonBody(BaseModel):
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v):
        return _not_blank(v)


class MentorCompleteBody(OptionalReasonBody):
    completion_reason: CompletionReason = Field(
        ..., description="goals_achieved or mentor_ended"
    )


# ======================
# RESPONSES
# ======================

class MentorshipResponse(BaseModel):
    id: int
    learner_id: int
    mentor_id: int
    status: MentorshipStatus
    message: Optional[str] = None
    consecutive_missed_weeks: int = 0
    completed_at: Optional[datetime] = None
    completion_reason: Optional[CompletionReason] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StatusLogResponse(BaseModel):
    id: int
    mentorship_id: int
    previous_status: MentorshipStatus
    new_status: MentorshipStatus
    reason: str
    triggered_by: TriggeredBy
    actor_id: Optional[int] = None
    system_context: Optional[Dict[str, Any]] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusHistoryResponse(BaseModel):
    mentorship_id: int
    count: int
    history: List[StatusLogResponse]
