# tests/test_reviews.py
"""
Two-way ratings on completed mentorships
"""

import pytest

from skillbridge.models.review import MentorReview
from skillbridge.models.user import UserRole
from skillbridge.services import lifecycle_service, review_service
from skillbridge.services.errors import DomainError, ErrorKind


@pytest.fixture
def completed(db_session, mentorship, mentor):
    result = lifecycle_service.complete_by_mentor(db_session, mentorship.id, mentor.id, "goals_achieved")
    assert result.ok
    return result.value


def test_learner_rates_mentor(db_session, completed, learner, mentor):
    review = review_service.submit_mentor_review(db_session, completed.id, learner.id, 5)

    assert review.rating == 5
    assert review.mentor_id == mentor.id
    assert review.reviewer_id == learner.id


def test_second_review_is_rejected_and_first_kept(db_session, completed, learner):
    review_service.submit_mentor_review(db_session, completed.id, learner.id, 4)

    with pytest.raises(DomainError) as exc:
        review_service.submit_mentor_review(db_session, completed.id, learner.id, 1)

    assert exc.value.kind == ErrorKind.VALIDATION_FAILED
    reviews = db_session.query(MentorReview).filter(MentorReview.mentorship_id == completed.id).all()
    assert [r.rating for r in reviews] == [4]


def test_cannot_rate_ongoing_mentorship(db_session, mentorship, learner):
    with pytest.raises(DomainError) as exc:
        review_service.submit_mentor_review(db_session, mentorship.id, learner.id, 5)

    assert exc.value.kind == ErrorKind.INVALID_STATE


@pytest.mark.parametrize("rating", [0, 6, 3.5, True])
def test_rating_must_be_one_to_five(db_session, completed, learner, rating):
    with pytest.raises(DomainError) as exc:
        review_service.submit_mentor_review(db_session, completed.id, learner.id, rating)

    assert exc.value.kind == ErrorKind.VALIDATION_FAILED


def test_only_the_parties_can_rate(db_session, completed, make_user, make_mentor):
    with pytest.raises(DomainError) as exc:
        review_service.submit_mentor_review(db_session, completed.id, make_user(UserRole.LEARNER).id, 5)
    assert exc.value.kind == ErrorKind.UNAUTHORIZED

    with pytest.raises(DomainError) as exc:
        review_service.submit_learner_feedback(db_session, completed.id, make_mentor().id, 5)
    assert exc.value.kind == ErrorKind.UNAUTHORIZED


def test_mentor_feedback_once(db_session, completed, mentor, learner):
    feedback = review_service.submit_learner_feedback(db_session, completed.id, mentor.id, 3)
    assert feedback.learner_id == learner.id

    with pytest.raises(DomainError) as exc:
        review_service.submit_learner_feedback(db_session, completed.id, mentor.id, 5)
    assert exc.value.kind == ErrorKind.VALIDATION_FAILED


def test_eligibility_checks(db_session, mentorship, learner, mentor):
    assert review_service.can_review_mentor(db_session, mentorship.id, learner.id) == (
        False, "Mentorship is not completed yet"
    )

    lifecycle_service.complete_by_learner(db_session, mentorship.id, learner.id)
    assert review_service.can_review_mentor(db_session, mentorship.id, learner.id) == (True, "Eligible to review")
    assert review_service.can_give_feedback(db_session, mentorship.id, mentor.id)[0] is True

    review_service.submit_mentor_review(db_session, mentorship.id, learner.id, 4)
    assert review_service.can_review_mentor(db_session, mentorship.id, learner.id) == (
        False, "You have already rated this mentor"
    )
    assert review_service.can_review_mentor(db_session, 9999, learner.id) == (False, "Mentorship not found")


def test_rating_stats_are_anonymous(db_session, make_user, make_mentor):
    mentor = make_mentor(capacity=5)
    for rating in (5, 5, 3):
        learner = make_user(UserRole.LEARNER)
        requested = lifecycle_service.request_mentorship(db_session, learner.id, mentor.id)
        lifecycle_service.accept_request(db_session, requested.value.id, mentor.id)
        lifecycle_service.complete_by_learner(db_session, requested.value.id, learner.id)
        review_service.submit_mentor_review(db_session, requested.value.id, learner.id, rating)

    stats = review_service.get_mentor_rating_stats(db_session, mentor.id)

    assert stats == {
        "mentor_id": mentor.id,
        "average_rating": 4.33,
        "total_reviews": 3,
        "rating_distribution": {1: 0, 2: 0, 3: 1, 4: 0, 5: 2},
    }


def test_rating_stats_for_unknown_mentor(db_session):
    with pytest.raises(DomainError) as exc:
        review_service.get_mentor_rating_stats(db_session, 9999)
    assert exc.value.kind == ErrorKind.NOT_FOUND
