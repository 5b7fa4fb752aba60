# skillbridge/schemas/reputation.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class MentorReputation(BaseModel):
    mentor_id: int
    review_count: int
    average_rating: Optional[float] = None
    completed_mentorships: int
    active_mentorships: int
    completion_rate: Optional[float] = None
    dropout_rate: float
    trust_score: Optional[int] = None
    experience_level: str


class MentorProfileSummary(BaseModel):
    id: int
    user: Dict[str, Any]
    skills: List[str]
    bio: Optional[str] = None
    capacity: int
    current_mentee_count: int
    is_available: bool
    created_at: Optional[datetime] = None


class MentorWithReputation(BaseModel):
    profile: MentorProfileSummary
    reputation: MentorReputation


class LearnerReliabilitySummary(BaseModel):
    learner_id: int
    reliability_score: Optional[int] = None
    risk_level: str
    completed_mentorships: int
    feedback_count: int
    average_rating: Optional[float] = None
    check_in_consistency_rate: Optional[float] = None
    warnings: List[str]
