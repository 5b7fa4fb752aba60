# skillbridge/models/mentorship.py
import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, JSON, String, TIMESTAMP, event, text
from sqlalchemy.orm import object_session, relationship

from skillbridge.database import Base
from skillbridge.utils.temporal import utcnow


class MentorshipStatus(str, enum.Enum):
    """Single status vocabulary shared by mentorships and their status log."""
    PENDING = "pending"
    ACTIVE = "active"
    AT_RISK = "at-risk"
    PAUSED = "paused"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Mentorships that hold one of the mentor's capacity slots
NON_TERMINAL_STATUSES = (
    MentorshipStatus.ACTIVE,
    MentorshipStatus.AT_RISK,
    MentorshipStatus.PAUSED,
)

# Mentorships the inactivity sweep looks at
MONITORED_STATUSES = (MentorshipStatus.ACTIVE, MentorshipStatus.AT_RISK)


class CompletionReason(str, enum.Enum):
    GOALS_ACHIEVED = "goals_achieved"
    MUTUAL_AGREEMENT = "mutual_agreement"
    MENTOR_ENDED = "mentor_ended"
    LEARNER_ENDED = "learner_ended"


EARLY_TERMINATION_REASONS = (CompletionReason.MENTOR_ENDED, CompletionReason.LEARNER_ENDED)


class TriggeredBy(str, enum.Enum):
    SYSTEM = "system"
    MENTOR = "mentor"
    LEARNER = "learner"
    ADMIN = "admin"


def _enum_column(enum_cls, **kwargs):
    # Persist the enum *values* ("at-risk"), not the member names
    return Column(
        Enum(
            enum_cls,
            values_callable=lambda members: [member.value for member in members],
            native_enum=False,
            length=20,
        ),
        **kwargs,
    )


class Mentorship(Base):
    __tablename__ = "mentorships"

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = _enum_column(MentorshipStatus, default=MentorshipStatus.PENDING, nullable=False, index=True)
    message = Column(String(300), default="")
    consecutive_missed_weeks = Column(Integer, default=0, nullable=False)
    completed_at = Column(TIMESTAMP, nullable=True)
    completion_reason = _enum_column(CompletionReason, nullable=True)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # At most one pending request per (learner, mentor) pair
        Index(
            "uq_mentorships_pending_pair",
            "learner_id",
            "mentor_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    learner = relationship("User", foreign_keys=[learner_id], back_populates="learner_mentorships")
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="mentor_mentorships")
    goals = relationship("Goal", back_populates="mentorship")
    status_logs = relationship(
        "MentorshipStatusLog",
        back_populates="mentorship",
        order_by="MentorshipStatusLog.timestamp.desc()",
    )

    @property
    def holds_capacity(self) -> bool:
        return self.status in NON_TERMINAL_STATUSES


class MentorshipStatusLog(Base):
    """Append-only audit trail of mentorship status transitions."""
    __tablename__ = "mentorship_status_logs"

    id = Column(Integer, primary_key=True, index=True)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id"), nullable=False)
    previous_status = _enum_column(MentorshipStatus, nullable=False)
    new_status = _enum_column(MentorshipStatus, nullable=False)
    reason = Column(String(500), nullable=False)
    triggered_by = _enum_column(TriggeredBy, nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    system_context = Column(JSON, nullable=True)
    timestamp = Column(TIMESTAMP, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_status_logs_mentorship_timestamp", "mentorship_id", "timestamp"),
        Index("ix_status_logs_triggered_by_timestamp", "triggered_by", "timestamp"),
    )

    mentorship = relationship("Mentorship", back_populates="status_logs")
    actor = relationship("User", foreign_keys=[actor_id])


class ImmutableRecordError(RuntimeError):
    pass


def _forbid_mutation(mapper, connection, target):
    session = object_session(target)
    if session is not None and target in session.dirty:
        if not session.is_modified(target, include_collections=False):
            return
    raise ImmutableRecordError(
        f"{target.__class__.__name__} rows are append-only and cannot be changed"
    )


event.listen(MentorshipStatusLog, "before_update", _forbid_mutation)
event.listen(MentorshipStatusLog, "before_delete", _forbid_mutation)
