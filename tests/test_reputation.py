# tests/test_reputation.py
"""
Mentor reputation: pure scoring plus the DB-backed discovery listing
"""

import pytest

from skillbridge.models.mentorship import CompletionReason
from skillbridge.models.user import UserRole
from skillbridge.services import lifecycle_service, reputation_service, review_service
from skillbridge.services.reputation_service import (
    _round_half_up,
    average_rating,
    get_experience_level,
    percentage,
    score_mentor_reputation,
    trust_score,
)

GOALS = CompletionReason.GOALS_ACHIEVED


# ======================
# PURE SCORING
# ======================

def test_three_completed_with_good_ratings():
    reputation = score_mentor_reputation([5, 4, 5], [GOALS, GOALS, GOALS], active_count=0)

    assert reputation["average_rating"] == 4.67
    assert reputation["completion_rate"] == 100.0
    assert reputation["dropout_rate"] == 0.0
    assert reputation["experience_level"] == "intermediate"
    # 50 * 4.67 / 5 + 30 * 100 / 100 + min(3 * 2, 20) = 82.7
    assert reputation["trust_score"] == 83


def test_no_reviews_means_no_trust_score():
    reputation = score_mentor_reputation([], [], active_count=0)

    assert reputation["average_rating"] is None
    assert reputation["completion_rate"] is None
    assert reputation["dropout_rate"] == 0.0
    assert reputation["trust_score"] is None
    assert reputation["experience_level"] == "new"


def test_dropouts_count_mentor_and_learner_endings():
    reputation = score_mentor_reputation(
        [4, 3],
        [GOALS, CompletionReason.LEARNER_ENDED, CompletionReason.MENTOR_ENDED, CompletionReason.MUTUAL_AGREEMENT],
        active_count=0,
    )

    assert reputation["dropout_rate"] == 50.0


def test_active_mentorships_lower_completion_rate():
    reputation = score_mentor_reputation([5], [GOALS], active_count=2)

    assert reputation["completion_rate"] == 33.3
    assert reputation["active_mentorships"] == 2


def test_trust_score_uses_default_completion_points():
    # 50 * 4 / 5 + 15 + 0
    assert trust_score(4.0, None, 0, 1) == 55


def test_trust_score_caps_experience_points():
    assert trust_score(5.0, 100.0, 40, 10) == 100


@pytest.mark.parametrize("count,level", [
    (0, "new"),
    (1, "beginner"),
    (2, "beginner"),
    (3, "intermediate"),
    (9, "intermediate"),
    (10, "experienced"),
    (24, "experienced"),
    (25, "expert"),
])
def test_experience_levels(count, level):
    assert get_experience_level(count) == level


def test_rounding_is_half_up():
    assert _round_half_up(2.5) == 3
    assert _round_half_up(82.5) == 83
    assert _round_half_up(0.125, 2) == 0.13
    assert percentage(2, 3) == 66.7
    assert percentage(1, 0) is None
    assert average_rating([]) is None
    assert average_rating([4, 5]) == 4.5


# ======================
# DB-BACKED
# ======================

def _completed_mentorship(db, make_user, mentor, reason=GOALS, rating=None):
    learner = make_user(UserRole.LEARNER)
    requested = lifecycle_service.request_mentorship(db, learner.id, mentor.id)
    lifecycle_service.accept_request(db, requested.value.id, mentor.id)
    completed = lifecycle_service.complete_by_mentor(db, requested.value.id, mentor.id, reason)
    assert completed.ok, completed
    if rating is not None:
        review_service.submit_mentor_review(db, requested.value.id, learner.id, rating)
    return completed.value


def test_calculate_mentor_reputation_from_store(db_session, make_user, make_mentor):
    mentor = make_mentor(capacity=5)
    for rating in (5, 4, 5):
        _completed_mentorship(db_session, make_user, mentor, rating=rating)

    reputation = reputation_service.calculate_mentor_reputation(db_session, mentor.id)

    assert reputation["mentor_id"] == mentor.id
    assert reputation["review_count"] == 3
    assert reputation["average_rating"] == 4.67
    assert reputation["completed_mentorships"] == 3
    assert reputation["completion_rate"] == 100.0
    assert reputation["trust_score"] == 83


def test_profile_with_reputation(db_session, mentor):
    result = reputation_service.get_mentor_profile_with_reputation(db_session, mentor.id)

    assert result["profile"]["capacity"] == 3
    assert result["profile"]["is_available"] is True
    assert result["reputation"]["trust_score"] is None
    assert reputation_service.get_mentor_profile_with_reputation(db_session, 9999) is None


def test_discovery_sorts_nulls_last(db_session, make_user, make_mentor):
    unrated = make_mentor()
    top = make_mentor()
    middling = make_mentor()
    _completed_mentorship(db_session, make_user, top, rating=5)
    _completed_mentorship(db_session, make_user, middling, rating=3)
    _completed_mentorship(db_session, make_user, middling, rating=3)

    by_rating = reputation_service.list_mentors_with_reputation(db_session, sort_by="rating")
    by_reviews = reputation_service.list_mentors_with_reputation(db_session, sort_by="reviews")
    by_trust = reputation_service.list_mentors_with_reputation(db_session, sort_by="trust")

    assert [m["profile"]["user"]["id"] for m in by_rating] == [top.id, middling.id, unrated.id]
    assert [m["profile"]["user"]["id"] for m in by_reviews] == [middling.id, top.id, unrated.id]
    assert by_trust[-1]["profile"]["user"]["id"] == unrated.id


def test_discovery_only_available(db_session, make_user, make_mentor):
    full = make_mentor(capacity=1)
    open_mentor = make_mentor(capacity=2)
    requested = lifecycle_service.request_mentorship(db_session, make_user(UserRole.LEARNER).id, full.id)
    lifecycle_service.accept_request(db_session, requested.value.id, full.id)
    db_session.expire_all()

    mentors = reputation_service.list_mentors_with_reputation(db_session, only_available=True)

    assert [m["profile"]["user"]["id"] for m in mentors] == [open_mentor.id]
