# skillbridge/models/activity.py
from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, JSON, String, Text, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import relationship

from skillbridge.database import Base
from skillbridge.utils.temporal import utcnow


class GoalStatus:
    ACTIVE = "active"
    COMPLETED = "completed"


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id"), nullable=False, index=True)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    status = Column(String(20), default=GoalStatus.ACTIVE, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('active', 'completed')", name="check_goal_status"),
    )

    mentorship = relationship("Mentorship", back_populates="goals")
    progress_updates = relationship(
        "ProgressUpdate", back_populates="goal", order_by="ProgressUpdate.created_at.desc()"
    )
    check_ins = relationship(
        "WeeklyCheckIn", back_populates="goal", order_by="WeeklyCheckIn.week_start_date.desc()"
    )


class ProgressUpdate(Base):
    __tablename__ = "progress_updates"

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_progress_updates_goal_created", "goal_id", "created_at"),
    )

    goal = relationship("Goal", back_populates="progress_updates")


class WeeklyCheckIn(Base):
    __tablename__ = "weekly_check_ins"

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id"), nullable=False)
    week_start_date = Column(TIMESTAMP, nullable=False)
    week_end_date = Column(TIMESTAMP, nullable=False)
    planned_tasks = Column(JSON, nullable=False)
    completed_tasks = Column(JSON, default=list, nullable=False)
    blockers = Column(String(500), default="")
    submitted_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    is_late = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # One check-in per goal per week
        UniqueConstraint("goal_id", "week_start_date", name="uq_check_in_goal_week"),
        Index("ix_check_ins_learner_week", "learner_id", "week_start_date"),
        Index("ix_check_ins_mentorship_week", "mentorship_id", "week_start_date"),
    )

    goal = relationship("Goal", back_populates="check_ins")
