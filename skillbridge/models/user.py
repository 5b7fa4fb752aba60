# skillbridge/models/user.py
from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, JSON, String, TIMESTAMP, func
from sqlalchemy.orm import relationship

from skillbridge.database import Base


class UserRole:
    LEARNER = "learner"
    MENTOR = "mentor"
    ADMIN = "admin"


# ---------------- USER ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    mentor_profile = relationship(
        "MentorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    learner_mentorships = relationship(
        "Mentorship", foreign_keys="Mentorship.learner_id", back_populates="learner"
    )
    mentor_mentorships = relationship(
        "Mentorship", foreign_keys="Mentorship.mentor_id", back_populates="mentor"
    )

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == UserRole.ADMIN


# ---------------- MENTOR PROFILE ----------------
class MentorProfile(Base):
    __tablename__ = "mentor_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    skills = Column(JSON, default=list, nullable=False)
    bio = Column(String(500), default="")
    capacity = Column(Integer, nullable=False)
    current_mentee_count = Column(Integer, default=0, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("capacity >= 1 AND capacity <= 20", name="check_capacity_range"),
        CheckConstraint("current_mentee_count >= 0", name="check_mentee_count_non_negative"),
    )

    user = relationship("User", back_populates="mentor_profile")

    @property
    def is_available(self) -> bool:
        # Derived, never stored
        return (self.current_mentee_count or 0) < self.capacity
