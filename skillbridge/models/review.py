# skillbridge/models/review.py
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, TIMESTAMP
from sqlalchemy.orm import relationship

from skillbridge.database import Base
from skillbridge.utils.temporal import utcnow


class MentorReview(Base):
    """Learner -> mentor rating, one per completed mentorship."""
    __tablename__ = "mentor_reviews"

    id = Column(Integer, primary_key=True, index=True)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id"), unique=True, nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_mentor_review_rating_range'),
    )

    mentorship = relationship("Mentorship")


class LearnerFeedback(Base):
    """Mentor -> learner rating, one per completed mentorship."""
    __tablename__ = "learner_feedback"

    id = Column(Integer, primary_key=True, index=True)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id"), unique=True, nullable=False)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    learner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='check_learner_feedback_rating_range'),
    )

    mentorship = relationship("Mentorship")
