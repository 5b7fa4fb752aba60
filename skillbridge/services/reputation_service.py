# skillbridge/services/reputation_service.py
"""
Reputation Engine
Mentor trust signals derived from completed-mentorship history and reviews.

trust score (0-100, only once at least one review exists):
    50 * avg_rating / 5
  + 30 * completion_rate / 100   (15 when there is no completion history)
  + min(completed * 2, 20)
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.crud import review as review_crud
from skillbridge.models.mentorship import (
    EARLY_TERMINATION_REASONS,
    NON_TERMINAL_STATUSES,
    CompletionReason,
    MentorshipStatus,
)
from skillbridge.models.user import MentorProfile

RATING_WEIGHT = 50
COMPLETION_WEIGHT = 30
COMPLETION_DEFAULT_POINTS = 15
POINTS_PER_COMPLETION = 2
EXPERIENCE_CAP = 20

SORT_KEYS = ("rating", "experience", "trust", "reviews", "newest")


def _round_half_up(value: float, places: int = 0):
    """Round like a human (2.5 -> 3), not like ``round`` (2.5 -> 2)."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def percentage(part: int, whole: int) -> Optional[float]:
    if whole <= 0:
        return None
    return _round_half_up(part / whole * 100, 1)


def average_rating(ratings: Sequence[int]) -> Optional[float]:
    if not ratings:
        return None
    return _round_half_up(sum(ratings) / len(ratings), 2)


def get_experience_level(completed_count: int) -> str:
    if completed_count == 0:
        return "new"
    if completed_count < 3:
        return "beginner"
    if completed_count < 10:
        return "intermediate"
    if completed_count < 25:
        return "experienced"
    return "expert"


def trust_score(
    avg_rating: Optional[float],
    completion_rate: Optional[float],
    completed_count: int,
    review_count: int,
) -> Optional[int]:
    if review_count < 1:
        return None

    rating_points = (avg_rating / 5) * RATING_WEIGHT if avg_rating is not None else 0
    if completion_rate is None:
        completion_points = COMPLETION_DEFAULT_POINTS
    else:
        completion_points = (completion_rate / 100) * COMPLETION_WEIGHT
    experience_points = min(completed_count * POINTS_PER_COMPLETION, EXPERIENCE_CAP)
    return _round_half_up(rating_points + completion_points + experience_points)


def score_mentor_reputation(
    ratings: Sequence[int],
    completion_reasons: Sequence[Optional[CompletionReason]],
    active_count: int,
) -> Dict[str, Any]:
    """
    Pure reputation calculation.

    Args:
        ratings: Every review rating the mentor received
        completion_reasons: One entry per completed mentorship
        active_count: Mentorships currently active, at-risk or paused

    Returns:
        Dictionary of reputation figures
    """
    completed = len(completion_reasons)
    early = sum(
        1 for reason in completion_reasons
        if reason is not None and CompletionReason(reason) in EARLY_TERMINATION_REASONS
    )
    avg = average_rating(ratings)
    completion_rate = percentage(completed, completed + active_count)

    return {
        "review_count": len(ratings),
        "average_rating": avg,
        "completed_mentorships": completed,
        "active_mentorships": active_count,
        "completion_rate": completion_rate,
        "dropout_rate": percentage(early, completed) or 0.0,
        "trust_score": trust_score(avg, completion_rate, completed, len(ratings)),
        "experience_level": get_experience_level(completed),
    }


# ======================
# READ MODELS
# ======================

def calculate_mentor_reputation(db: Session, mentor_id: int) -> Dict[str, Any]:
    completed = mentorship_crud.get_mentorships_by_mentor(
        db, mentor_id, statuses=(MentorshipStatus.COMPLETED,)
    )
    active = mentorship_crud.get_mentorships_by_mentor(db, mentor_id, statuses=NON_TERMINAL_STATUSES)

    reputation = score_mentor_reputation(
        review_crud.get_mentor_ratings(db, mentor_id),
        [m.completion_reason for m in completed],
        len(active),
    )
    return {"mentor_id": mentor_id, **reputation}


def _profile_dict(profile: MentorProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "user": {"id": profile.user.id, "name": profile.user.name, "email": profile.user.email},
        "skills": profile.skills or [],
        "bio": profile.bio,
        "capacity": profile.capacity,
        "current_mentee_count": profile.current_mentee_count,
        "is_available": profile.is_available,
        "created_at": profile.created_at,
    }


def get_mentor_profile_with_reputation(db: Session, mentor_id: int) -> Optional[Dict[str, Any]]:
    profile = mentorship_crud.get_mentor_profile(db, mentor_id)
    if not profile:
        return None
    return {
        "profile": _profile_dict(profile),
        "reputation": calculate_mentor_reputation(db, mentor_id),
    }


def _nulls_last(field: str):
    def key(entry):
        value = entry["reputation"][field]
        return (value is None, -(value or 0))
    return key


def list_mentors_with_reputation(
    db: Session,
    sort_by: str = "rating",
    only_available: bool = False,
) -> List[Dict[str, Any]]:
    """
    Mentor discovery list.

    Args:
        db: Database session
        sort_by: rating, experience, trust, reviews or newest (anything else
            falls back to newest)
        only_available: Drop mentors with no free capacity

    Returns:
        List of {"profile": ..., "reputation": ...}
    """
    mentors = [
        {"profile": _profile_dict(profile), "reputation": calculate_mentor_reputation(db, profile.user_id)}
        for profile in mentorship_crud.list_mentor_profiles(db)
    ]

    if only_available:
        mentors = [m for m in mentors if m["profile"]["is_available"]]

    if sort_by == "rating":
        mentors.sort(key=_nulls_last("average_rating"))
    elif sort_by == "trust":
        mentors.sort(key=_nulls_last("trust_score"))
    elif sort_by == "experience":
        mentors.sort(key=lambda m: m["reputation"]["completed_mentorships"], reverse=True)
    elif sort_by == "reviews":
        mentors.sort(key=lambda m: m["reputation"]["review_count"], reverse=True)
    else:
        mentors.sort(
            key=lambda m: (m["profile"]["created_at"] is not None, m["profile"]["created_at"] or 0),
            reverse=True,
        )
    return mentors
