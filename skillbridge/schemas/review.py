# skillbridge/schemas/review.py
"""
Rating Pydantic Schemas
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingCreate(BaseModel):
    mentorship_id: int = Field(..., description="Completed mentorship identifier")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")


class RatingResponse(BaseModel):
    """Confirmation returned to the rater; never shown to the rated party"""
    id: int
    mentorship_id: int
    rating: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EligibilityResponse(BaseModel):
    mentorship_id: int
    can_rate: bool
    reason: str


class MentorRatingStats(BaseModel):
    mentor_id: int
    average_rating: Optional[float] = None
    total_reviews: int
    rating_distribution: Dict[int, int]
