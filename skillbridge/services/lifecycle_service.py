# skillbridge/services/lifecycle_service.py
"""
Mentorship Lifecycle Controller
Learner, mentor and admin initiated transitions.

Every public action returns ``Ok(mentorship)`` or ``Err(kind, message)``.
Guards run before any write; a rejected action leaves no mutation and no
status log entry behind. Capacity-holding statuses (active, at-risk, paused)
keep the mentor's ``current_mentee_count`` in step on every transition into
or out of that set.
"""

import functools
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.models.mentorship import (
    NON_TERMINAL_STATUSES,
    CompletionReason,
    Mentorship,
    MentorshipStatus,
    MentorshipStatusLog,
    TriggeredBy,
)
from skillbridge.models.user import User, UserRole
from skillbridge.services import admin_service, status_log
from skillbridge.services.errors import (
    DomainError,
    Err,
    ErrorKind,
    Ok,
    Result,
    invalid_state,
    not_found,
    unauthorized,
    validation_failed,
)
from skillbridge.utils.temporal import utcnow

logger = logging.getLogger(__name__)

MAX_REQUEST_MESSAGE_LENGTH = 300
MENTOR_COMPLETION_REASONS = (CompletionReason.GOALS_ACHIEVED, CompletionReason.MENTOR_ENDED)


def lifecycle_action(func):
    """Commit on success, roll back and convert domain errors into ``Err``."""
    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs) -> Result:
        try:
            mentorship = func(db, *args, **kwargs)
            db.commit()
        except DomainError as exc:
            db.rollback()
            logger.info("%s rejected (%s): %s", func.__name__, exc.kind.value, exc.message)
            return Err(exc.kind, exc.message)
        except IntegrityError:
            db.rollback()
            return Err(ErrorKind.DUPLICATE_ACTIVE, "A conflicting mentorship record already exists")
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(mentorship)
        return Ok(mentorship)
    return wrapper


# ======================
# GUARDS
# ======================

def _load(db: Session, mentorship_id: int) -> Mentorship:
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        raise not_found("Mentorship")
    return mentorship


def _require_mentor(mentorship: Mentorship, mentor_id: int) -> None:
    if mentorship.mentor_id != mentor_id:
        raise unauthorized("Only the mentor of this mentorship can do that")


def _require_learner(mentorship: Mentorship, learner_id: int) -> None:
    if mentorship.learner_id != learner_id:
        raise unauthorized("Only the learner of this mentorship can do that")


def _require_admin(db: Session, admin_id: int) -> User:
    admin = mentorship_crud.get_user(db, admin_id)
    if admin is None or not admin.is_admin:
        raise unauthorized("Admin access required")
    return admin


def _require_status(mentorship: Mentorship, allowed, action: str) -> None:
    if mentorship.status not in allowed:
        raise invalid_state(
            f"Cannot {action} a mentorship with status '{MentorshipStatus(mentorship.status).value}'"
        )


def _complete(
    db: Session,
    mentorship: Mentorship,
    completion_reason: CompletionReason,
    reason: str,
    triggered_by: TriggeredBy,
    actor_id: int,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    held_capacity = mentorship.holds_capacity
    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.COMPLETED,
        reason,
        triggered_by,
        actor_id=actor_id,
        context=context,
    )
    mentorship.completed_at = utcnow()
    mentorship.completion_reason = completion_reason
    if held_capacity:
        mentorship_crud.adjust_mentee_count(db, mentorship.mentor_id, -1)


# ======================
# REQUESTS
# ======================

@lifecycle_action
def request_mentorship(db: Session, learner_id: int, mentor_id: int, message: str = "") -> Mentorship:
    """
    Learner sends a mentorship request; it starts as ``pending``.

    Fails with CAPACITY_EXCEEDED when the mentor is full and DUPLICATE_ACTIVE
    when the learner already has a non-terminal mentorship or a pending
    request to the same mentor.
    """
    learner = mentorship_crud.get_user(db, learner_id)
    if learner is None:
        raise not_found("Learner")
    if learner.role != UserRole.LEARNER:
        raise unauthorized("Only learners can request a mentor")

    mentor = mentorship_crud.get_user(db, mentor_id)
    if mentor is None or mentor.role != UserRole.MENTOR:
        raise not_found("Mentor")

    if message and len(message) > MAX_REQUEST_MESSAGE_LENGTH:
        raise validation_failed(f"Message cannot exceed {MAX_REQUEST_MESSAGE_LENGTH} characters")

    profile = mentorship_crud.get_mentor_profile(db, mentor_id)
    if profile is None:
        raise validation_failed("Mentor has not set up their profile yet")
    if not profile.is_available:
        raise DomainError(ErrorKind.CAPACITY_EXCEEDED, "Mentor has reached their capacity")

    if mentorship_crud.get_non_terminal_mentorship_for_learner(db, learner_id):
        raise DomainError(ErrorKind.DUPLICATE_ACTIVE, "You already have an active mentorship")
    if mentorship_crud.get_pending_request(db, learner_id, mentor_id):
        raise DomainError(ErrorKind.DUPLICATE_ACTIVE, "You already have a pending request to this mentor")

    return mentorship_crud.create_mentorship_request(db, learner_id, mentor_id, message)


@lifecycle_action
def accept_request(db: Session, mentorship_id: int, mentor_id: int) -> Mentorship:
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    if mentorship.status != MentorshipStatus.PENDING:
        raise invalid_state("This request has already been processed")

    profile = mentorship_crud.get_mentor_profile(db, mentor_id)
    if profile is None or not profile.is_available:
        raise DomainError(ErrorKind.CAPACITY_EXCEEDED, "You have reached your mentee capacity")

    if mentorship_crud.get_non_terminal_mentorship_for_learner(db, mentorship.learner_id):
        raise DomainError(ErrorKind.DUPLICATE_ACTIVE, "Learner already has an active mentorship")

    mentorship.consecutive_missed_weeks = 0
    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.ACTIVE,
        "Mentorship request accepted by mentor",
        TriggeredBy.MENTOR,
        actor_id=mentor_id,
    )
    mentorship_crud.adjust_mentee_count(db, mentor_id, +1)
    return mentorship


@lifecycle_action
def reject_request(db: Session, mentorship_id: int, mentor_id: int, reason: Optional[str] = None) -> Mentorship:
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    if mentorship.status != MentorshipStatus.PENDING:
        raise invalid_state("This request has already been processed")

    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.REJECTED,
        reason or "Mentorship request declined by mentor",
        TriggeredBy.MENTOR,
        actor_id=mentor_id,
    )
    return mentorship


# ======================
# MENTOR ACTIONS
# ======================

@lifecycle_action
def pause_by_mentor(db: Session, mentorship_id: int, mentor_id: int, reason: str) -> Mentorship:
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    reason = status_log.clean_reason(reason)
    _require_status(
        mentorship, (MentorshipStatus.ACTIVE, MentorshipStatus.AT_RISK), "pause"
    )

    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.PAUSED,
        reason,
        TriggeredBy.MENTOR,
        actor_id=mentor_id,
        context={"consecutive_missed_weeks": mentorship.consecutive_missed_weeks},
    )
    return mentorship


@lifecycle_action
def reactivate_by_mentor(db: Session, mentorship_id: int, mentor_id: int, reason: Optional[str] = None) -> Mentorship:
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    _require_status(mentorship, (MentorshipStatus.PAUSED,), "reactivate")

    # Missed weeks are forgiven on reactivation
    mentorship.consecutive_missed_weeks = 0
    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.ACTIVE,
        reason or "Mentorship reactivated by mentor",
        TriggeredBy.MENTOR,
        actor_id=mentor_id,
        context={"consecutive_missed_weeks": 0},
    )
    return mentorship


@lifecycle_action
def flag_poor_commitment(db: Session, mentorship_id: int, mentor_id: int, reason: str) -> Mentorship:
    """
    Mentor flags declining commitment. An active mentorship becomes at-risk;
    an at-risk one stays put but the flag is still logged.
    """
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    reason = status_log.clean_reason(reason)
    _require_status(
        mentorship, (MentorshipStatus.ACTIVE, MentorshipStatus.AT_RISK), "flag"
    )

    context = {"consecutive_missed_weeks": mentorship.consecutive_missed_weeks}
    if mentorship.status == MentorshipStatus.ACTIVE:
        status_log.transition(
            db,
            mentorship,
            MentorshipStatus.AT_RISK,
            reason,
            TriggeredBy.MENTOR,
            actor_id=mentor_id,
            context=context,
        )
    else:
        status_log.record(
            db,
            mentorship.id,
            MentorshipStatus.AT_RISK,
            MentorshipStatus.AT_RISK,
            reason,
            TriggeredBy.MENTOR,
            actor_id=mentor_id,
            context=context,
        )
    return mentorship


@lifecycle_action
def complete_by_mentor(
    db: Session,
    mentorship_id: int,
    mentor_id: int,
    completion_reason: CompletionReason,
    reason: Optional[str] = None,
) -> Mentorship:
    mentorship = _load(db, mentorship_id)
    _require_mentor(mentorship, mentor_id)
    try:
        completion_reason = CompletionReason(completion_reason)
    except ValueError:
        raise validation_failed("Unknown completion reason") from None
    if completion_reason not in MENTOR_COMPLETION_REASONS:
        raise validation_failed("Mentors can complete with 'goals_achieved' or 'mentor_ended'")
    _require_status(mentorship, NON_TERMINAL_STATUSES, "complete")

    default_reason = (
        "Mentorship completed: goals achieved"
        if completion_reason == CompletionReason.GOALS_ACHIEVED
        else "Mentorship ended by mentor"
    )
    _complete(
        db,
        mentorship,
        completion_reason,
        reason or default_reason,
        TriggeredBy.MENTOR,
        mentor_id,
    )
    return mentorship


# ======================
# LEARNER ACTIONS
# ======================

@lifecycle_action
def complete_by_learner(db: Session, mentorship_id: int, learner_id: int, reason: Optional[str] = None) -> Mentorship:
    """Learner ends their mentorship. Only allowed while exactly ``active``."""
    mentorship = _load(db, mentorship_id)
    _require_learner(mentorship, learner_id)
    if mentorship.status != MentorshipStatus.ACTIVE:
        raise invalid_state(
            "Only an active mentorship can be completed by the learner "
            f"(current status: '{MentorshipStatus(mentorship.status).value}')"
        )

    _complete(
        db,
        mentorship,
        CompletionReason.LEARNER_ENDED,
        reason or "Mentorship ended by learner",
        TriggeredBy.LEARNER,
        learner_id,
    )
    return mentorship


# ======================
# ADMIN ACTIONS
# ======================

_ADMIN_CONTEXT = {"admin_action": True}


@lifecycle_action
def _admin_pause(db: Session, mentorship_id: int, admin_id: int, reason: str) -> Mentorship:
    _require_admin(db, admin_id)
    reason = status_log.clean_reason(reason, status_log.MAX_ADMIN_REASON_LENGTH)
    mentorship = _load(db, mentorship_id)
    _require_status(mentorship, NON_TERMINAL_STATUSES, "pause")

    status_log.transition(
        db,
        mentorship,
        MentorshipStatus.PAUSED,
        status_log.ADMIN_REASON_PREFIX + reason,
        TriggeredBy.ADMIN,
        actor_id=admin_id,
        context=_ADMIN_CONTEXT,
    )
    return mentorship


@lifecycle_action
def _admin_complete(db: Session, mentorship_id: int, admin_id: int, reason: str) -> Mentorship:
    _require_admin(db, admin_id)
    reason = status_log.clean_reason(reason, status_log.MAX_ADMIN_REASON_LENGTH)
    mentorship = _load(db, mentorship_id)
    _require_status(mentorship, NON_TERMINAL_STATUSES, "complete")

    _complete(
        db,
        mentorship,
        CompletionReason.MUTUAL_AGREEMENT,
        status_log.ADMIN_REASON_PREFIX + reason,
        TriggeredBy.ADMIN,
        admin_id,
        context=_ADMIN_CONTEXT,
    )
    return mentorship


def admin_pause_mentorship(db: Session, mentorship_id: int, admin_id: int, reason: str) -> Result:
    """Dispute resolution: pause any active, at-risk or paused mentorship."""
    result = _admin_pause(db, mentorship_id, admin_id, reason)
    if result.ok:
        admin_service.record_admin_action(
            db,
            admin_id=admin_id,
            action_type=admin_service.AuditAction.MENTORSHIP_PAUSED,
            target_type="mentorship",
            target_id=mentorship_id,
            reason=reason.strip(),
            details={"status": MentorshipStatus(result.value.status).value},
        )
    return result


def admin_complete_mentorship(db: Session, mentorship_id: int, admin_id: int, reason: str) -> Result:
    """Dispute resolution: close a mentorship as ``mutual_agreement``."""
    result = _admin_complete(db, mentorship_id, admin_id, reason)
    if result.ok:
        admin_service.record_admin_action(
            db,
            admin_id=admin_id,
            action_type=admin_service.AuditAction.MENTORSHIP_COMPLETED,
            target_type="mentorship",
            target_id=mentorship_id,
            reason=reason.strip(),
            details={"completion_reason": CompletionReason.MUTUAL_AGREEMENT.value},
        )
    return result


# ======================
# READS
# ======================

def get_status_history(db: Session, mentorship_id: int, actor_id: int) -> Result:
    """Status log for a mentorship, visible to its mentor, its learner and admins."""
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        return Err(ErrorKind.NOT_FOUND, "Mentorship not found")

    if actor_id not in (mentorship.mentor_id, mentorship.learner_id):
        actor = mentorship_crud.get_user(db, actor_id)
        if actor is None or not actor.is_admin:
            return Err(ErrorKind.UNAUTHORIZED, "Not authorized to view this mentorship")

    entries: List[MentorshipStatusLog] = status_log.history(db, mentorship_id)
    return Ok(entries)
