# skillbridge/services/status_log.py
"""
Mentorship Status Log
Append-only ledger of every mentorship status transition.

Entries are written in the same transaction as the status change they
describe. Nothing here updates or deletes an entry.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.models.mentorship import (
    Mentorship,
    MentorshipStatus,
    MentorshipStatusLog,
    TriggeredBy,
)
from skillbridge.services.errors import validation_failed
from skillbridge.utils.temporal import utcnow

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500

ADMIN_REASON_PREFIX = "Admin action: "
MAX_ADMIN_REASON_LENGTH = MAX_REASON_LENGTH - len(ADMIN_REASON_PREFIX)


def clean_reason(reason: Optional[str], max_length: int = MAX_REASON_LENGTH) -> str:
    """
    Normalise a transition reason.

    Raises:
        DomainError: VALIDATION_FAILED if the reason is blank or too long
    """
    cleaned = (reason or "").strip()
    if not cleaned:
        raise validation_failed("A reason is required for this status change")
    if len(cleaned) > max_length:
        raise validation_failed(f"Reason cannot exceed {max_length} characters")
    return cleaned


def _serialise_context(context: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not context:
        return None
    serialised = {}
    for key, value in context.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        serialised[key] = value
    return serialised


def record(
    db: Session,
    mentorship_id: int,
    previous_status: MentorshipStatus,
    new_status: MentorshipStatus,
    reason: str,
    triggered_by: TriggeredBy,
    *,
    actor_id: Optional[int] = None,
    context: Optional[Dict[str, Any]] = None,
) -> MentorshipStatusLog:
    """
    Append one entry to the status log (flushed, not committed).

    Args:
        db: Database session
        mentorship_id: Mentorship the transition belongs to
        previous_status: Status before the transition
        new_status: Status after the transition (equal to previous for flag events)
        reason: Human readable reason, required
        triggered_by: system, mentor, learner or admin
        actor_id: User who initiated the change (None for the system)
        context: Counters that explain an automated change

    Returns:
        The new MentorshipStatusLog row
    """
    return mentorship_crud.create_status_log(
        db,
        mentorship_id=mentorship_id,
        previous_status=MentorshipStatus(previous_status),
        new_status=MentorshipStatus(new_status),
        reason=clean_reason(reason),
        triggered_by=TriggeredBy(triggered_by),
        actor_id=actor_id,
        system_context=_serialise_context(context),
        timestamp=utcnow(),
    )


def transition(
    db: Session,
    mentorship: Mentorship,
    new_status: MentorshipStatus,
    reason: str,
    triggered_by: TriggeredBy,
    *,
    actor_id: Optional[int] = None,
    context: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Move a mentorship to ``new_status`` and log it. The caller commits.

    A transition to the current status is a no-op: nothing is logged and the
    mentorship is left untouched.

    Returns:
        True if the status changed
    """
    previous_status = MentorshipStatus(mentorship.status)
    new_status = MentorshipStatus(new_status)
    if previous_status == new_status:
        return False

    record(
        db,
        mentorship.id,
        previous_status,
        new_status,
        reason,
        triggered_by,
        actor_id=actor_id,
        context=context,
    )
    mentorship.status = new_status
    logger.info(
        "Mentorship %s: %s -> %s (%s, missed_weeks=%s)",
        mentorship.id,
        previous_status.value,
        new_status.value,
        TriggeredBy(triggered_by).value,
        mentorship.consecutive_missed_weeks,
    )
    return True


def history(db: Session, mentorship_id: int) -> List[MentorshipStatusLog]:
    """All log entries for a mentorship, newest first."""
    return mentorship_crud.get_status_logs(db, mentorship_id)
