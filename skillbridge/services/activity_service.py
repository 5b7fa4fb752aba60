# skillbridge/services/activity_service.py
"""
Activity Service Layer
Goals, progress updates and weekly check-ins: the learner activity the
inactivity engine measures.

Functions raise ``DomainError`` on a rejected request and commit on success.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from skillbridge.crud import activity as activity_crud
from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.models.activity import Goal, GoalStatus, ProgressUpdate, WeeklyCheckIn
from skillbridge.models.mentorship import NON_TERMINAL_STATUSES, Mentorship, MentorshipStatus
from skillbridge.services.errors import DomainError, ErrorKind, invalid_state, not_found, unauthorized, validation_failed
from skillbridge.services.inactivity_service import (
    InactivityEngine,
    InactivitySignal,
    ProgressUpdatePolicy,
    get_inactivity_engine,
)
from skillbridge.utils.temporal import days_ago, is_submission_late, utcnow, week_boundaries

logger = logging.getLogger(__name__)

MAX_GOAL_TITLE_LENGTH = 100
MAX_GOAL_DESCRIPTION_LENGTH = 500
MAX_PROGRESS_CONTENT_LENGTH = 1000
MAX_PLANNED_TASKS = 10
MAX_COMPLETED_TASKS = 10
MAX_BLOCKERS_LENGTH = 500
DEFAULT_TIMELINE_WEEKS = 12
DEFAULT_SUMMARY_DAYS = 30


def _goal_or_404(db: Session, goal_id: int) -> Goal:
    goal = activity_crud.get_goal(db, goal_id)
    if goal is None:
        raise not_found("Goal")
    return goal


def _mentorship_or_404(db: Session, mentorship_id: int) -> Mentorship:
    mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
    if mentorship is None:
        raise not_found("Mentorship")
    return mentorship


def _can_view(db: Session, mentorship: Mentorship, user_id: int) -> bool:
    if user_id in (mentorship.learner_id, mentorship.mentor_id):
        return True
    user = mentorship_crud.get_user(db, user_id)
    return user is not None and user.is_admin


def _require_open_for_activity(goal: Goal, mentorship: Mentorship, what: str) -> None:
    if goal.status != GoalStatus.ACTIVE:
        raise invalid_state(f"Cannot submit a {what} for a completed goal")
    if mentorship.status == MentorshipStatus.PAUSED:
        raise invalid_state(f"Cannot submit a {what} while the mentorship is paused")
    if mentorship.status not in NON_TERMINAL_STATUSES:
        raise invalid_state(f"Cannot submit a {what} for a closed mentorship")


def _clean_tasks(tasks: Optional[Sequence[str]]) -> List[str]:
    return [task.strip() for task in (tasks or []) if task and task.strip()]


# ======================
# GOALS
# ======================

def create_goal(
    db: Session,
    mentorship_id: int,
    mentor_id: int,
    title: str,
    description: str,
) -> Goal:
    """
    Mentor sets a goal for their mentee.

    Raises:
        DomainError: NOT_FOUND, UNAUTHORIZED, INVALID_STATE or VALIDATION_FAILED
    """
    mentorship = _mentorship_or_404(db, mentorship_id)
    if mentorship.mentor_id != mentor_id:
        raise unauthorized("Only the mentor of this mentorship can set goals")
    if mentorship.status not in NON_TERMINAL_STATUSES:
        raise invalid_state("Goals can only be added to an ongoing mentorship")

    title = (title or "").strip()
    description = (description or "").strip()
    if not title or len(title) > MAX_GOAL_TITLE_LENGTH:
        raise validation_failed(f"Title must be 1-{MAX_GOAL_TITLE_LENGTH} characters")
    if not description or len(description) > MAX_GOAL_DESCRIPTION_LENGTH:
        raise validation_failed(f"Description must be 1-{MAX_GOAL_DESCRIPTION_LENGTH} characters")

    try:
        goal = activity_crud.create_goal(db, mentorship_id, mentorship.learner_id, title, description)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(goal)
    return goal


def update_goal_status(db: Session, goal_id: int, user_id: int, status: str) -> Goal:
    goal = _goal_or_404(db, goal_id)
    mentorship = _mentorship_or_404(db, goal.mentorship_id)
    if user_id not in (mentorship.learner_id, mentorship.mentor_id):
        raise unauthorized("Not authorized to update this goal")
    if status not in (GoalStatus.ACTIVE, GoalStatus.COMPLETED):
        raise validation_failed("Goal status must be 'active' or 'completed'")

    goal.status = status
    db.commit()
    db.refresh(goal)
    return goal


def list_goals(db: Session, mentorship_id: int, user_id: int) -> List[Goal]:
    mentorship = _mentorship_or_404(db, mentorship_id)
    if not _can_view(db, mentorship, user_id):
        raise unauthorized("Not authorized to view these goals")
    return activity_crud.get_goals_for_mentorship(db, mentorship_id)


# ======================
# PROGRESS UPDATES
# ======================

def add_progress_update(
    db: Session,
    goal_id: int,
    learner_id: int,
    content: str,
    engine: Optional[InactivityEngine] = None,
) -> ProgressUpdate:
    """
    Learner posts a progress note on one of their goals.

    When progress updates are the authoritative inactivity signal this also
    resets the mentorship's counter and restores an at-risk mentorship.
    """
    goal = _goal_or_404(db, goal_id)
    if goal.learner_id != learner_id:
        raise unauthorized("Not authorized to update this goal")
    mentorship = _mentorship_or_404(db, goal.mentorship_id)
    _require_open_for_activity(goal, mentorship, "progress update")

    content = (content or "").strip()
    if not content:
        raise validation_failed("Progress update cannot be empty")
    if len(content) > MAX_PROGRESS_CONTENT_LENGTH:
        raise validation_failed(f"Progress update cannot exceed {MAX_PROGRESS_CONTENT_LENGTH} characters")

    engine = engine or get_inactivity_engine()
    try:
        update = activity_crud.create_progress_update(db, goal.id, learner_id, content)
        engine.register_activity(db, mentorship, InactivitySignal.PROGRESS_UPDATE, update.created_at)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(update)
    return update


def list_progress_updates(db: Session, goal_id: int, user_id: int) -> List[ProgressUpdate]:
    goal = _goal_or_404(db, goal_id)
    if not _can_view(db, _mentorship_or_404(db, goal.mentorship_id), user_id):
        raise unauthorized("Not authorized to view this goal")
    return list(goal.progress_updates)


# ======================
# WEEKLY CHECK-INS
# ======================

def submit_check_in(
    db: Session,
    goal_id: int,
    learner_id: int,
    planned_tasks: Sequence[str],
    completed_tasks: Optional[Sequence[str]] = None,
    blockers: Optional[str] = None,
    week_start_date: Union[date, datetime, None] = None,
    engine: Optional[InactivityEngine] = None,
    now: Optional[datetime] = None,
) -> WeeklyCheckIn:
    """
    Learner submits the weekly check-in for a goal.

    Args:
        db: Database session
        goal_id: Goal the check-in belongs to
        learner_id: Submitting learner, must own the goal
        planned_tasks: 1-10 tasks planned for the week
        completed_tasks: Up to 10 tasks done
        blockers: Free text, up to 500 characters
        week_start_date: Any day of an earlier week for a late submission
            (defaults to the current week)
        engine: Inactivity engine to notify (defaults to the configured one)
        now: Submission time (defaults to now)

    Returns:
        The new WeeklyCheckIn

    Raises:
        DomainError: DUPLICATE_ACTIVE when the goal already has a check-in
            for that week; NOT_FOUND, UNAUTHORIZED, INVALID_STATE or
            VALIDATION_FAILED otherwise
    """
    now = now or utcnow()
    goal = _goal_or_404(db, goal_id)
    if goal.learner_id != learner_id:
        raise unauthorized("Not authorized to submit a check-in for this goal")
    mentorship = _mentorship_or_404(db, goal.mentorship_id)
    _require_open_for_activity(goal, mentorship, "check-in")

    planned = _clean_tasks(planned_tasks)
    completed = _clean_tasks(completed_tasks)
    blockers = (blockers or "").strip()
    if not 1 <= len(planned) <= MAX_PLANNED_TASKS:
        raise validation_failed(f"Provide between 1 and {MAX_PLANNED_TASKS} planned tasks")
    if len(completed) > MAX_COMPLETED_TASKS:
        raise validation_failed(f"Cannot list more than {MAX_COMPLETED_TASKS} completed tasks")
    if len(blockers) > MAX_BLOCKERS_LENGTH:
        raise validation_failed(f"Blockers cannot exceed {MAX_BLOCKERS_LENGTH} characters")

    current_week_start, _ = week_boundaries(now)
    week_start, week_end = week_boundaries(week_start_date if week_start_date is not None else now)
    if week_start > current_week_start:
        raise validation_failed("Cannot submit a check-in for a future week")

    if activity_crud.get_check_in_for_week(db, goal.id, week_start, week_end):
        raise DomainError(ErrorKind.DUPLICATE_ACTIVE, "A check-in already exists for this goal and week")

    engine = engine or get_inactivity_engine()
    try:
        check_in = activity_crud.create_check_in(
            db,
            goal_id=goal.id,
            learner_id=learner_id,
            mentorship_id=mentorship.id,
            week_start_date=week_start,
            week_end_date=week_end,
            planned_tasks=planned,
            completed_tasks=completed,
            blockers=blockers,
            submitted_at=now,
            is_late=is_submission_late(week_end, now),
        )
        engine.register_activity(db, mentorship, InactivitySignal.CHECK_IN, now)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DomainError(
            ErrorKind.DUPLICATE_ACTIVE, "A check-in already exists for this goal and week"
        ) from None
    except Exception:
        db.rollback()
        raise

    db.refresh(check_in)
    if check_in.is_late:
        logger.info("Late check-in %s for goal %s (week of %s)", check_in.id, goal.id, week_start.date())
    return check_in


def list_check_ins_for_goal(db: Session, goal_id: int, user_id: int) -> List[WeeklyCheckIn]:
    goal = _goal_or_404(db, goal_id)
    if not _can_view(db, _mentorship_or_404(db, goal.mentorship_id), user_id):
        raise unauthorized("Not authorized to view check-ins for this goal")
    return activity_crud.get_check_ins_for_goal(db, goal_id)


def _check_in_dict(check_in: WeeklyCheckIn) -> Dict[str, Any]:
    return {
        "id": check_in.id,
        "planned_tasks": check_in.planned_tasks,
        "completed_tasks": check_in.completed_tasks,
        "blockers": check_in.blockers,
        "submitted_at": check_in.submitted_at,
        "is_late": check_in.is_late,
    }


def get_goal_timeline(
    db: Session,
    goal_id: int,
    user_id: int,
    weeks_back: int = DEFAULT_TIMELINE_WEEKS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Week-by-week check-in record for a goal, newest week first.

    Each week is labelled ``submitted``, ``late``, ``missed`` or ``current``
    (the running week without a check-in yet). Weeks that ended before the
    goal existed are left out.
    """
    now = now or utcnow()
    goal = _goal_or_404(db, goal_id)
    if not _can_view(db, _mentorship_or_404(db, goal.mentorship_id), user_id):
        raise unauthorized("Not authorized to view this timeline")

    timeline = []
    for offset in range(weeks_back):
        week_start, week_end = week_boundaries(now - timedelta(days=7 * offset))
        if week_end < goal.created_at:
            continue

        check_in = activity_crud.get_check_in_for_week(db, goal.id, week_start, week_end)
        if check_in is not None:
            status = "late" if check_in.is_late else "submitted"
        elif week_end >= now:
            status = "current"
        else:
            status = "missed"

        timeline.append({
            "week_start": week_start,
            "week_end": week_end,
            "status": status,
            "check_in": _check_in_dict(check_in) if check_in is not None else None,
        })

    return {
        "goal": {
            "id": goal.id,
            "title": goal.title,
            "status": goal.status,
            "created_at": goal.created_at,
        },
        "timeline": timeline,
    }


# ======================
# CONSISTENCY SUMMARY
# ======================

def get_learner_consistency_summary(
    db: Session,
    mentorship_id: int,
    user_id: int,
    days_back: int = DEFAULT_SUMMARY_DAYS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Mentor-facing digest of a mentee's recent progress updates."""
    now = now or utcnow()
    mentorship = _mentorship_or_404(db, mentorship_id)
    if not _can_view(db, mentorship, user_id):
        raise unauthorized("Not authorized to view this mentorship")

    goals = activity_crud.get_goals_for_mentorship(db, mentorship_id)
    titles = {goal.id: goal.title for goal in goals}
    recent = activity_crud.get_progress_updates_since(db, titles.keys(), days_ago(days_back, now))
    measurement = ProgressUpdatePolicy().measure(db, mentorship, now)

    return {
        "mentorship": {
            "id": mentorship.id,
            "status": MentorshipStatus(mentorship.status).value,
            "consecutive_missed_weeks": mentorship.consecutive_missed_weeks,
            "days_since_last_update": measurement.days_since_update,
        },
        "learner": {"id": mentorship.learner.id, "name": mentorship.learner.name},
        "progress_updates": [
            {
                "id": update.id,
                "goal": {"id": update.goal_id, "title": titles.get(update.goal_id)},
                "content": update.content,
                "created_at": update.created_at,
            }
            for update in recent
        ],
        "stats": {
            "total_goals": len(goals),
            "active_goals": sum(1 for g in goals if g.status == GoalStatus.ACTIVE),
            "completed_goals": sum(1 for g in goals if g.status == GoalStatus.COMPLETED),
            "total_progress_updates": len(recent),
            "days_since_last_update": measurement.days_since_update,
            "last_progress_update": measurement.last_activity_at,
        },
    }
