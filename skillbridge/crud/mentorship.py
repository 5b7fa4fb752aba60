# skillbridge/crud/mentorship.py
"""
Mentorship CRUD Operations
Store reads/writes for mentorships, mentor profiles and the status log
"""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from skillbridge.models.mentorship import (
    NON_TERMINAL_STATUSES,
    Mentorship,
    MentorshipStatus,
    MentorshipStatusLog,
)
from skillbridge.models.user import MentorProfile, User


# ======================
# USERS & PROFILES
# ======================

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_mentor_profile(db: Session, mentor_id: int) -> Optional[MentorProfile]:
    """
    Get a mentor's profile by the mentor's user ID.

    Args:
        db: Database session
        mentor_id: Mentor user ID

    Returns:
        MentorProfile or None if the mentor has not set one up
    """
    return db.query(MentorProfile).filter(MentorProfile.user_id == mentor_id).first()


def list_mentor_profiles(db: Session) -> List[MentorProfile]:
    return db.query(MentorProfile).order_by(MentorProfile.created_at.desc()).all()


def adjust_mentee_count(db: Session, mentor_id: int, delta: int) -> int:
    """
    Atomically add ``delta`` to a mentor's current mentee count.

    Args:
        db: Database session
        mentor_id: Mentor user ID
        delta: +1 when a mentorship enters the active set, -1 when it leaves

    Returns:
        Number of profile rows updated (0 when the mentor has no profile)
    """
    return db.query(MentorProfile).filter(
        MentorProfile.user_id == mentor_id
    ).update(
        {MentorProfile.current_mentee_count: MentorProfile.current_mentee_count + delta},
        synchronize_session="fetch",
    )


# ======================
# MENTORSHIPS
# ======================

def get_mentorship(db: Session, mentorship_id: int) -> Optional[Mentorship]:
    return db.query(Mentorship).filter(Mentorship.id == mentorship_id).first()


def create_mentorship_request(
    db: Session,
    learner_id: int,
    mentor_id: int,
    message: str = "",
) -> Mentorship:
    mentorship = Mentorship(
        learner_id=learner_id,
        mentor_id=mentor_id,
        message=message or "",
        status=MentorshipStatus.PENDING,
    )
    db.add(mentorship)
    db.flush()
    return mentorship


def get_mentorships_by_status(
    db: Session,
    statuses: Iterable[MentorshipStatus],
) -> List[Mentorship]:
    return db.query(Mentorship).filter(
        Mentorship.status.in_(list(statuses))
    ).order_by(Mentorship.id).all()


def get_mentorships_by_mentor(
    db: Session,
    mentor_id: int,
    statuses: Optional[Iterable[MentorshipStatus]] = None,
) -> List[Mentorship]:
    query = db.query(Mentorship).filter(Mentorship.mentor_id == mentor_id)
    if statuses is not None:
        query = query.filter(Mentorship.status.in_(list(statuses)))
    return query.order_by(Mentorship.created_at.desc()).all()


def get_mentorships_by_learner(
    db: Session,
    learner_id: int,
    statuses: Optional[Iterable[MentorshipStatus]] = None,
) -> List[Mentorship]:
    query = db.query(Mentorship).filter(Mentorship.learner_id == learner_id)
    if statuses is not None:
        query = query.filter(Mentorship.status.in_(list(statuses)))
    return query.order_by(Mentorship.created_at.desc()).all()


def get_non_terminal_mentorship_for_learner(db: Session, learner_id: int) -> Optional[Mentorship]:
    return db.query(Mentorship).filter(
        Mentorship.learner_id == learner_id,
        Mentorship.status.in_(NON_TERMINAL_STATUSES),
    ).first()


def get_pending_request(db: Session, learner_id: int, mentor_id: int) -> Optional[Mentorship]:
    return db.query(Mentorship).filter(
        Mentorship.learner_id == learner_id,
        Mentorship.mentor_id == mentor_id,
        Mentorship.status == MentorshipStatus.PENDING,
    ).first()


def count_capacity_holding(db: Session, mentor_id: int) -> int:
    """Mentorships of a mentor that occupy a capacity slot."""
    return db.query(Mentorship).filter(
        Mentorship.mentor_id == mentor_id,
        Mentorship.status.in_(NON_TERMINAL_STATUSES),
    ).count()


def list_mentorships(
    db: Session,
    status: Optional[MentorshipStatus] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Mentorship]:
    query = db.query(Mentorship)
    if status is not None:
        query = query.filter(Mentorship.status == status)
    return query.order_by(Mentorship.created_at.desc()).limit(limit).offset(offset).all()


def count_mentorships(db: Session, status: Optional[MentorshipStatus] = None) -> int:
    query = db.query(Mentorship)
    if status is not None:
        query = query.filter(Mentorship.status == status)
    return query.count()


# ======================
# STATUS LOG
# ======================

def create_status_log(db: Session, **fields) -> MentorshipStatusLog:
    entry = MentorshipStatusLog(**fields)
    db.add(entry)
    db.flush()
    return entry


def get_status_logs(db: Session, mentorship_id: int) -> List[MentorshipStatusLog]:
    return db.query(MentorshipStatusLog).filter(
        MentorshipStatusLog.mentorship_id == mentorship_id
    ).order_by(
        MentorshipStatusLog.timestamp.desc(),
        MentorshipStatusLog.id.desc(),
    ).all()
