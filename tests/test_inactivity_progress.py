# tests/test_inactivity_progress.py
"""
Inactivity engine driven by progress-update recency
"""

from datetime import datetime, timedelta

import pytest

from skillbridge.crud import activity as activity_crud
from skillbridge.models.mentorship import MentorshipStatus, TriggeredBy
from skillbridge.services import activity_service, status_log
from skillbridge.services.inactivity_service import (
    InactivityEngine,
    InactivitySignal,
    ProgressUpdatePolicy,
    get_inactivity_engine,
)

NOW = datetime(2026, 3, 11, 12, 0, 0)


@pytest.fixture
def engine():
    return InactivityEngine(ProgressUpdatePolicy())


def _post_update(db, goal, days_before_now):
    activity_crud.create_progress_update(
        db, goal.id, goal.learner_id, "Worked on it", created_at=NOW - timedelta(days=days_before_now)
    )
    db.commit()


def test_engine_for_progress_signal():
    assert get_inactivity_engine("progress_update").signal == InactivitySignal.PROGRESS_UPDATE


def test_recent_update_keeps_mentorship_active(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=NOW - timedelta(days=40))
    _post_update(db_session, goal, 3)

    engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.ACTIVE
    assert mentorship.consecutive_missed_weeks == 0


def test_ten_quiet_days_is_at_risk(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=NOW - timedelta(days=40))
    _post_update(db_session, goal, 10)

    engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK
    assert mentorship.consecutive_missed_weeks == 1
    entry = status_log.history(db_session, mentorship.id)[0]
    assert entry.triggered_by == TriggeredBy.SYSTEM
    assert entry.reason == "Inactivity warning: 10 days without progress update"
    assert entry.system_context["days_since_update"] == 10


def test_sixteen_quiet_days_pauses_straight_from_active(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=NOW - timedelta(days=40))
    _post_update(db_session, goal, 16)

    engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.PAUSED
    assert mentorship.consecutive_missed_weeks == 2
    entry = status_log.history(db_session, mentorship.id)[0]
    assert entry.previous_status == MentorshipStatus.ACTIVE
    assert entry.new_status == MentorshipStatus.PAUSED


def test_without_goals_nothing_happens(db_session, engine, mentorship):
    results = engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.ACTIVE
    assert results[0].changed is False
    assert results[0].counter_value == 0


def test_goal_age_counts_when_no_update_was_ever_posted(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=NOW - timedelta(days=8))

    measurement = engine.policy.measure(db_session, mentorship, NOW)
    engine.process_all(db_session, now=NOW)

    assert measurement.days_since_update == 8
    assert measurement.last_activity_at is None
    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK


def test_progress_update_restores_at_risk(db_session, engine, mentorship, make_goal, learner):
    goal = make_goal(mentorship, created_at=NOW - timedelta(days=40))
    _post_update(db_session, goal, 10)
    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK

    activity_service.add_progress_update(db_session, goal.id, learner.id, "Back on track", engine=engine)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.ACTIVE
    assert mentorship.consecutive_missed_weeks == 0
    entry = status_log.history(db_session, mentorship.id)[0]
    assert entry.reason == ProgressUpdatePolicy.RESTORED_REASON


def test_check_in_is_ignored_under_progress_signal(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=NOW - timedelta(days=40))
    _post_update(db_session, goal, 10)
    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)

    assert engine.register_activity(db_session, mentorship, InactivitySignal.CHECK_IN, NOW) is False
    assert mentorship.status == MentorshipStatus.AT_RISK
