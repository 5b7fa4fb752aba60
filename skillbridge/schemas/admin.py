# skillbridge/schemas/admin.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from skillbridge.schemas.mentorship import MentorshipResponse


class AuditLogResponse(BaseModel):
    id: int
    admin_id: int
    action_type: str
    target_type: str
    target_id: int
    reason: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MentorshipListResponse(BaseModel):
    total: int
    limit: int
    offset: int
    items: List[MentorshipResponse]


class SweepResultResponse(BaseModel):
    mentorship_id: int
    resulting_status: Optional[str] = None
    counter_value: Optional[int] = None
    changed: bool = False
    error: Optional[str] = None


class SweepResponse(BaseModel):
    processed: int
    changed: int
    failed: int
    results: List[SweepResultResponse]


class SchedulerStatusResponse(BaseModel):
    running: bool
    schedule: Dict[str, int]
    next_run: Optional[datetime] = None
    last_run: Optional[datetime] = None
    last_result: Optional[Dict[str, int]] = None
    last_error: Optional[str] = None
