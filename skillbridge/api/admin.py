# skillbridge/api/admin.py
"""
Admin API Router
Dispute resolution, audit trail and inactivity sweep control
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from skillbridge.api.deps import unwrap
from skillbridge.database import get_db
from skillbridge.models.mentorship import MentorshipStatus
from skillbridge.models.user import User
from skillbridge.schemas.admin import (
    AuditLogResponse,
    MentorshipListResponse,
    SchedulerStatusResponse,
    SweepResponse,
)
from skillbridge.schemas.mentorship import AdminReasonBody, MentorshipResponse
from skillbridge.services import admin_service, lifecycle_service
from skillbridge.services.scheduler import InactivityScheduler
from skillbridge.utils.security import require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


def _scheduler(request: Request) -> InactivityScheduler:
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        # App started without its lifespan
        scheduler = InactivityScheduler.from_settings()
        request.app.state.scheduler = scheduler
    return scheduler


# ─────────────────────────────────────────
# Mentorship oversight
# ─────────────────────────────────────────
@router.get("/mentorships", response_model=MentorshipListResponse)
def list_mentorships(
    status: Optional[MentorshipStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return admin_service.list_mentorships(db, status, limit, offset)


@router.get("/mentorships/{mentorship_id}")
def get_mentorship_details(
    mentorship_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    details = admin_service.get_mentorship_details(db, mentorship_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Mentorship not found")
    return details


@router.post("/mentorships/{mentorship_id}/pause", response_model=MentorshipResponse)
def pause_mentorship(
    mentorship_id: int,
    body: AdminReasonBody,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.admin_pause_mentorship(db, mentorship_id, admin.id, body.reason))


@router.post("/mentorships/{mentorship_id}/complete", response_model=MentorshipResponse)
def complete_mentorship(
    mentorship_id: int,
    body: AdminReasonBody,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return unwrap(lifecycle_service.admin_complete_mentorship(db, mentorship_id, admin.id, body.reason))


# ─────────────────────────────────────────
# Audit trail
# ─────────────────────────────────────────
@router.get("/audit-logs", response_model=List[AuditLogResponse])
def get_audit_logs(
    target_id: int = Query(...),
    target_type: str = Query("mentorship"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return admin_service.get_audit_history(db, target_type, target_id)


# ─────────────────────────────────────────
# Inactivity sweep
# ─────────────────────────────────────────
@router.post("/inactivity/run", response_model=SweepResponse)
def run_inactivity_sweep(
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    results = _scheduler(request).run_now()
    summary = {
        "processed": len(results),
        "changed": sum(1 for r in results if r["changed"]),
        "failed": sum(1 for r in results if r["error"]),
    }
    admin_service.record_admin_action(
        db,
        admin_id=admin.id,
        action_type=admin_service.AuditAction.INACTIVITY_SWEEP_TRIGGERED,
        target_type="inactivity_sweep",
        target_id=0,
        reason="Manual inactivity sweep",
        details=summary,
    )
    return {**summary, "results": results}


@router.get("/inactivity/scheduler", response_model=SchedulerStatusResponse)
def get_scheduler_status(request: Request, admin: User = Depends(require_admin)):
    return _scheduler(request).status()
