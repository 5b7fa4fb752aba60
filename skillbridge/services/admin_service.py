from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from skillbridge.crud import activity as activity_crud
from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.crud import review as review_crud
from skillbridge.models.audit import AdminAuditLog
from skillbridge.models.mentorship import MentorshipStatus
from skillbridge.services import status_log

logger = logging.getLogger(__name__)


class AuditAction:
    MENTORSHIP_PAUSED = "mentorship_paused"
    MENTORSHIP_COMPLETED = "mentorship_completed"
    INACTIVITY_SWEEP_TRIGGERED = "inactivity_sweep_triggered"


def record_admin_action(
    db: Session,
    *,
    admin_id: int,
    action_type: str,
    target_type: str,
    target_id: int,
    reason: str,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[AdminAuditLog]:
    """
    Best-effort audit entry for an admin action that has already committed.
    This function never raises; a failed write is only reported in the logs.
    """
    try:
        entry = AdminAuditLog(
            admin_id=admin_id,
            action_type=action_type,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            details=details or {},
        )
        db.add(entry)
        db.commit()
        return entry
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Admin audit write failed (admin_id=%s, action=%s, target=%s:%s): %s",
            admin_id,
            action_type,
            target_type,
            target_id,
            exc,
        )
        return None


def get_audit_history(db: Session, target_type: str, target_id: int) -> List[AdminAuditLog]:
    return db.query(AdminAuditLog).filter(
        AdminAuditLog.target_type == target_type,
        AdminAuditLog.target_id == target_id,
    ).order_by(AdminAuditLog.created_at.desc(), AdminAuditLog.id.desc()).all()


def get_mentorship_details(db: Session, mentorship_id: int) -> Optional[Dict[str, Any]]:
    """Everything an admin needs to resolve a dispute about one mentorship."""
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if not mentorship:
        return None

    profile = mentorship_crud.get_mentor_profile(db, mentorship.mentor_id)
    goals = activity_crud.get_goals_for_mentorship(db, mentorship_id)
    check_ins = activity_crud.get_check_ins_for_mentorship(db, mentorship_id)
    review = review_crud.get_mentor_review_by_mentorship(db, mentorship_id)
    feedback = review_crud.get_learner_feedback_by_mentorship(db, mentorship_id)

    return {
        "mentorship": {
            "id": mentorship.id,
            "learner_id": mentorship.learner_id,
            "mentor_id": mentorship.mentor_id,
            "status": MentorshipStatus(mentorship.status).value,
            "message": mentorship.message,
            "consecutive_missed_weeks": mentorship.consecutive_missed_weeks,
            "completed_at": mentorship.completed_at,
            "completion_reason": mentorship.completion_reason.value if mentorship.completion_reason else None,
            "created_at": mentorship.created_at,
        },
        "mentor_profile": {
            "capacity": profile.capacity,
            "current_mentee_count": profile.current_mentee_count,
            "is_available": profile.is_available,
        } if profile else None,
        "goals": [
            {
                "id": goal.id,
                "title": goal.title,
                "status": goal.status,
                "created_at": goal.created_at,
                "progress_updates": [
                    {"id": pu.id, "content": pu.content, "created_at": pu.created_at}
                    for pu in goal.progress_updates
                ],
            }
            for goal in goals
        ],
        "check_ins": [
            {
                "id": c.id,
                "goal_id": c.goal_id,
                "week_start_date": c.week_start_date,
                "week_end_date": c.week_end_date,
                "planned_tasks": c.planned_tasks,
                "completed_tasks": c.completed_tasks,
                "blockers": c.blockers,
                "submitted_at": c.submitted_at,
                "is_late": c.is_late,
            }
            for c in check_ins
        ],
        "review": {"rating": review.rating, "created_at": review.created_at} if review else None,
        "feedback": {"rating": feedback.rating, "created_at": feedback.created_at} if feedback else None,
        "status_history": [
            {
                "previous_status": MentorshipStatus(entry.previous_status).value,
                "new_status": MentorshipStatus(entry.new_status).value,
                "reason": entry.reason,
                "triggered_by": entry.triggered_by.value,
                "actor_id": entry.actor_id,
                "system_context": entry.system_context,
                "timestamp": entry.timestamp,
            }
            for entry in status_log.history(db, mentorship_id)
        ],
        "admin_audit_history": [
            {
                "admin_id": entry.admin_id,
                "action_type": entry.action_type,
                "reason": entry.reason,
                "metadata": entry.details,
                "created_at": entry.created_at,
            }
            for entry in get_audit_history(db, "mentorship", mentorship_id)
        ],
    }


def list_mentorships(
    db: Session,
    status: Optional[MentorshipStatus] = None,
    limit: int = 20,
    offset: int = 0,
) -> Dict[str, Any]:
    return {
        "total": mentorship_crud.count_mentorships(db, status),
        "limit": limit,
        "offset": offset,
        "items": mentorship_crud.list_mentorships(db, status, limit, offset),
    }
