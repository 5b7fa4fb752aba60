# skillbridge/services/reliability_service.py
"""
Reliability Engine
Learner reliability signals shown to mentors before they accept a request.

reliability score (0-100, once feedback exists or 4+ countable weeks):
    40 * avg_rating / 5                      (20 without feedback)
  + 30 * submitted_weeks / countable_weeks   (15 without countable weeks)
  + 20 * completion_rate / 100
  + 10 * (100 - early_termination_rate) / 100
                                             (15 for both without history)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from skillbridge.crud import activity as activity_crud
from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.crud import review as review_crud
from skillbridge.models.activity import GoalStatus
from skillbridge.models.mentorship import NON_TERMINAL_STATUSES, CompletionReason, MentorshipStatus
from skillbridge.services.reputation_service import _round_half_up, average_rating, percentage
from skillbridge.utils.temporal import previous_weeks, utcnow

CONSISTENCY_WINDOW_WEEKS = 12
MIN_WEEKS_FOR_SCORE = 4

FEEDBACK_WEIGHT = 40
FEEDBACK_DEFAULT_POINTS = 20
CONSISTENCY_WEIGHT = 30
CONSISTENCY_DEFAULT_POINTS = 15
COMPLETION_WEIGHT = 20
STICK_WITH_IT_WEIGHT = 10
HISTORY_DEFAULT_POINTS = 15


def calculate_check_in_consistency(
    db: Session,
    learner_id: int,
    weeks_back: int = CONSISTENCY_WINDOW_WEEKS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Submitted vs missed weeks across the learner's active goals.

    Only weeks that have fully elapsed are counted; the current week is
    never scored.
    """
    now = now or utcnow()
    goal_ids = [goal.id for goal in activity_crud.get_goals_for_learner(db, learner_id, GoalStatus.ACTIVE)]
    if not goal_ids:
        return {
            "total_weeks": 0,
            "submitted_weeks": 0,
            "missed_weeks": 0,
            "late_submissions": 0,
            "consistency_rate": None,
        }

    submitted = missed = late = countable = 0
    for week_start, week_end in previous_weeks(now, weeks_back):
        if week_end >= now:
            continue
        countable += 1
        check_ins = activity_crud.get_goal_check_ins_for_week(db, goal_ids, week_start, week_end)
        if check_ins:
            submitted += 1
            if any(check_in.is_late for check_in in check_ins):
                late += 1
        else:
            missed += 1

    return {
        "total_weeks": countable,
        "submitted_weeks": submitted,
        "missed_weeks": missed,
        "late_submissions": late,
        "consistency_rate": percentage(submitted, countable),
    }


def reliability_score(
    avg_rating: Optional[float],
    feedback_count: int,
    check_in_stats: Dict[str, Any],
    completion_rate: Optional[float],
    early_termination_rate: float,
) -> Optional[int]:
    if feedback_count < 1 and check_in_stats["total_weeks"] < MIN_WEEKS_FOR_SCORE:
        return None

    feedback_points = FEEDBACK_DEFAULT_POINTS
    if avg_rating is not None:
        feedback_points = (avg_rating / 5) * FEEDBACK_WEIGHT

    consistency_points = CONSISTENCY_DEFAULT_POINTS
    if check_in_stats["total_weeks"] > 0:
        consistency_points = (
            check_in_stats["submitted_weeks"] / check_in_stats["total_weeks"] * CONSISTENCY_WEIGHT
        )

    history_points = HISTORY_DEFAULT_POINTS
    if completion_rate is not None:
        history_points = (completion_rate / 100) * COMPLETION_WEIGHT
        history_points += (100 - early_termination_rate) / 100 * STICK_WITH_IT_WEIGHT

    return _round_half_up(feedback_points + consistency_points + history_points)


def risk_level(score: Optional[int]) -> str:
    if score is None:
        return "unknown"
    if score >= 70:
        return "low"
    if score >= 50:
        return "medium"
    return "high"


def calculate_learner_reliability(
    db: Session,
    learner_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    completed = mentorship_crud.get_mentorships_by_learner(
        db, learner_id, statuses=(MentorshipStatus.COMPLETED,)
    )
    active = mentorship_crud.get_mentorships_by_learner(db, learner_id, statuses=NON_TERMINAL_STATUSES)
    ratings = review_crud.get_learner_ratings(db, learner_id)

    avg = average_rating(ratings)
    check_in_stats = calculate_check_in_consistency(db, learner_id, now=now)
    completion_rate = percentage(len(completed), len(completed) + len(active))
    learner_ended = sum(1 for m in completed if m.completion_reason == CompletionReason.LEARNER_ENDED)
    early_termination_rate = percentage(learner_ended, len(completed)) or 0.0

    score = reliability_score(avg, len(ratings), check_in_stats, completion_rate, early_termination_rate)
    return {
        "learner_id": learner_id,
        "feedback_count": len(ratings),
        "average_rating": avg,
        "completed_mentorships": len(completed),
        "active_mentorships": len(active),
        "completion_rate": completion_rate,
        "early_termination_rate": early_termination_rate,
        "check_in_stats": check_in_stats,
        "reliability_score": score,
        "risk_level": risk_level(score),
    }


def generate_warnings(reliability: Dict[str, Any]) -> List[str]:
    warnings = []
    if reliability["risk_level"] == "high":
        warnings.append("This learner has a low reliability score.")
    if reliability["early_termination_rate"] > 30:
        warnings.append("This learner has ended mentorships early in the past.")
    consistency = reliability["check_in_stats"]["consistency_rate"]
    if consistency is not None and consistency < 50:
        warnings.append("This learner has inconsistent check-in history.")
    if reliability["average_rating"] is not None and reliability["average_rating"] < 2.5:
        warnings.append("Previous mentors have reported concerns about this learner.")
    return warnings


def get_learner_reliability_summary(
    db: Session,
    learner_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """What a mentor sees about a learner before accepting their request."""
    reliability = calculate_learner_reliability(db, learner_id, now=now)
    return {
        "learner_id": learner_id,
        "reliability_score": reliability["reliability_score"],
        "risk_level": reliability["risk_level"],
        "completed_mentorships": reliability["completed_mentorships"],
        "feedback_count": reliability["feedback_count"],
        "average_rating": reliability["average_rating"],
        "check_in_consistency_rate": reliability["check_in_stats"]["consistency_rate"],
        "warnings": generate_warnings(reliability),
    }
