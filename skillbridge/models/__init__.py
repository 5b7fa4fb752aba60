# skillbridge/models/__init__.py
# Import models in dependency order
from .user import User, MentorProfile, UserRole
from .mentorship import (
    CompletionReason,
    Mentorship,
    MentorshipStatus,
    MentorshipStatusLog,
    TriggeredBy,
)
from .activity import Goal, GoalStatus, ProgressUpdate, WeeklyCheckIn
from .review import MentorReview, LearnerFeedback
from .audit import AdminAuditLog

__all__ = [
    "User",
    "MentorProfile",
    "UserRole",
    "Mentorship",
    "MentorshipStatus",
    "MentorshipStatusLog",
    "CompletionReason",
    "TriggeredBy",
    "Goal",
    "GoalStatus",
    "ProgressUpdate",
    "WeeklyCheckIn",
    "MentorReview",
    "LearnerFeedback",
    "AdminAuditLog",
]
