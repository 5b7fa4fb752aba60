# skillbridge/crud/activity.py
"""
Activity CRUD Operations
Goals, progress updates and weekly check-ins
"""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from skillbridge.models.activity import Goal, GoalStatus, ProgressUpdate, WeeklyCheckIn


# ======================
# GOALS
# ======================

def get_goal(db: Session, goal_id: int) -> Optional[Goal]:
    return db.query(Goal).filter(Goal.id == goal_id).first()


def create_goal(
    db: Session,
    mentorship_id: int,
    learner_id: int,
    title: str,
    description: str,
) -> Goal:
    goal = Goal(
        mentorship_id=mentorship_id,
        learner_id=learner_id,
        title=title,
        description=description,
        status=GoalStatus.ACTIVE,
    )
    db.add(goal)
    db.flush()
    return goal


def get_goals_for_mentorship(
    db: Session,
    mentorship_id: int,
    status: Optional[str] = None,
) -> List[Goal]:
    query = db.query(Goal).filter(Goal.mentorship_id == mentorship_id)
    if status is not None:
        query = query.filter(Goal.status == status)
    return query.order_by(Goal.created_at).all()


def get_goals_for_learner(
    db: Session,
    learner_id: int,
    status: Optional[str] = None,
) -> List[Goal]:
    query = db.query(Goal).filter(Goal.learner_id == learner_id)
    if status is not None:
        query = query.filter(Goal.status == status)
    return query.order_by(Goal.created_at).all()


# ======================
# PROGRESS UPDATES
# ======================

def create_progress_update(db: Session, goal_id: int, learner_id: int, content: str, created_at: Optional[datetime] = None) -> ProgressUpdate:
    update = ProgressUpdate(goal_id=goal_id, learner_id=learner_id, content=content)
    if created_at is not None:
        update.created_at = created_at
    db.add(update)
    db.flush()
    return update


def get_latest_progress_update(db: Session, goal_ids: Iterable[int]) -> Optional[ProgressUpdate]:
    """Most recent progress update across the given goals."""
    goal_ids = list(goal_ids)
    if not goal_ids:
        return None
    return db.query(ProgressUpdate).filter(
        ProgressUpdate.goal_id.in_(goal_ids)
    ).order_by(ProgressUpdate.created_at.desc(), ProgressUpdate.id.desc()).first()


def get_progress_updates_since(
    db: Session,
    goal_ids: Iterable[int],
    since: datetime,
) -> List[ProgressUpdate]:
    goal_ids = list(goal_ids)
    if not goal_ids:
        return []
    return db.query(ProgressUpdate).filter(
        ProgressUpdate.goal_id.in_(goal_ids),
        ProgressUpdate.created_at >= since,
    ).order_by(ProgressUpdate.created_at.desc()).all()


# ======================
# WEEKLY CHECK-INS
# ======================

def create_check_in(db: Session, **fields) -> WeeklyCheckIn:
    check_in = WeeklyCheckIn(**fields)
    db.add(check_in)
    db.flush()
    return check_in


def get_check_in_for_week(db: Session, goal_id: int, week_start: datetime, week_end: datetime) -> Optional[WeeklyCheckIn]:
    return db.query(WeeklyCheckIn).filter(
        WeeklyCheckIn.goal_id == goal_id,
        WeeklyCheckIn.week_start_date >= week_start,
        WeeklyCheckIn.week_start_date <= week_end,
    ).first()


def get_mentorship_check_ins_for_week(
    db: Session,
    mentorship_id: int,
    week_start: datetime,
    week_end: datetime,
) -> List[WeeklyCheckIn]:
    return db.query(WeeklyCheckIn).filter(
        WeeklyCheckIn.mentorship_id == mentorship_id,
        WeeklyCheckIn.week_start_date >= week_start,
        WeeklyCheckIn.week_start_date <= week_end,
    ).all()


def get_goal_check_ins_for_week(
    db: Session,
    goal_ids: Iterable[int],
    week_start: datetime,
    week_end: datetime,
) -> List[WeeklyCheckIn]:
    goal_ids = list(goal_ids)
    if not goal_ids:
        return []
    return db.query(WeeklyCheckIn).filter(
        WeeklyCheckIn.goal_id.in_(goal_ids),
        WeeklyCheckIn.week_start_date >= week_start,
        WeeklyCheckIn.week_start_date <= week_end,
    ).all()


def get_check_ins_for_goal(db: Session, goal_id: int) -> List[WeeklyCheckIn]:
    return db.query(WeeklyCheckIn).filter(
        WeeklyCheckIn.goal_id == goal_id
    ).order_by(WeeklyCheckIn.week_start_date.desc()).all()


def get_check_ins_for_mentorship(db: Session, mentorship_id: int) -> List[WeeklyCheckIn]:
    return db.query(WeeklyCheckIn).filter(
        WeeklyCheckIn.mentorship_id == mentorship_id
    ).order_by(WeeklyCheckIn.week_start_date.desc()).all()


def get_last_check_in_at(db: Session, mentorship_id: int) -> Optional[datetime]:
    return db.query(func.max(WeeklyCheckIn.submitted_at)).filter(
        WeeklyCheckIn.mentorship_id == mentorship_id
    ).scalar()
