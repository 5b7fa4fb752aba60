# skillbridge/schemas/__init__.py

# Mentorship schemas
from .mentorship import (
    AdminReasonBody,
    MentorshipRequestCreate,
    MentorCompleteBody,
    MentorshipResponse,
    OptionalReasonBody,
    ReasonBody,
    StatusHistoryResponse,
    StatusLogResponse,
)

# Activity schemas
from .activity import (
    CheckInCreate,
    CheckInResponse,
    GoalCreate,
    GoalResponse,
    GoalStatusUpdate,
    GoalTimelineResponse,
    ProgressUpdateCreate,
    ProgressUpdateResponse,
)

# Rating schemas
from .review import EligibilityResponse, MentorRatingStats, RatingCreate, RatingResponse

# Reputation schemas
from .reputation import LearnerReliabilitySummary, MentorWithReputation

# Admin schemas
from .admin import (
    AuditLogResponse,
    MentorshipListResponse,
    SchedulerStatusResponse,
    SweepResponse,
)
