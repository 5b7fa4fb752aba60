# tests/test_inactivity_check_in.py
"""
Inactivity engine driven by weekly check-ins (the default signal)
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from skillbridge.config import Settings
from skillbridge.crud import activity as activity_crud
from skillbridge.models.activity import GoalStatus
from skillbridge.models.mentorship import MentorshipStatus, MentorshipStatusLog, TriggeredBy
from skillbridge.services import activity_service, status_log
from skillbridge.services.inactivity_service import (
    CheckInPolicy,
    InactivityEngine,
    InactivitySignal,
    get_inactivity_engine,
)
from skillbridge.utils.temporal import week_boundaries

# Wednesday; current week is Mon 2026-03-09 .. Sun 2026-03-15
NOW = datetime(2026, 3, 11, 12, 0, 0)


@pytest.fixture
def engine():
    return InactivityEngine(CheckInPolicy())


def _add_check_in(db, goal, moment, submitted_at=None):
    week_start, week_end = week_boundaries(moment)
    activity_crud.create_check_in(
        db,
        goal_id=goal.id,
        learner_id=goal.learner_id,
        mentorship_id=goal.mentorship_id,
        week_start_date=week_start,
        week_end_date=week_end,
        planned_tasks=["read chapter"],
        completed_tasks=[],
        blockers="",
        submitted_at=submitted_at or week_start + timedelta(days=2),
        is_late=False,
    )
    db.commit()


def _logs(db, mentorship_id):
    return db.query(MentorshipStatusLog).filter(
        MentorshipStatusLog.mentorship_id == mentorship_id
    ).count()


def test_default_engine_uses_check_ins():
    assert get_inactivity_engine().signal == InactivitySignal.CHECK_IN


@pytest.mark.parametrize("value", ["checkin", "weekly", ""])
def test_unknown_signal_setting_is_rejected_at_load(monkeypatch, value):
    monkeypatch.setenv("INACTIVITY_SIGNAL", value)

    with pytest.raises(ValidationError):
        Settings()


def test_signal_setting_accepts_progress_updates(monkeypatch):
    monkeypatch.setenv("INACTIVITY_SIGNAL", "progress_update")

    assert get_inactivity_engine(Settings().INACTIVITY_SIGNAL).signal == InactivitySignal.PROGRESS_UPDATE


def test_two_missed_weeks_puts_mentorship_at_risk(db_session, engine, mentorship, make_goal):
    # Goal exists for exactly the two weeks before this one
    make_goal(mentorship, created_at=datetime(2026, 2, 25, 9, 0))
    logs_before = _logs(db_session, mentorship.id)

    results = engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK
    assert mentorship.consecutive_missed_weeks == 2
    assert _logs(db_session, mentorship.id) == logs_before + 1

    entry = status_log.history(db_session, mentorship.id)[0]
    assert entry.previous_status == MentorshipStatus.ACTIVE
    assert entry.new_status == MentorshipStatus.AT_RISK
    assert entry.triggered_by == TriggeredBy.SYSTEM
    assert entry.system_context["consecutive_missed_weeks"] == 2

    assert [r.as_dict() for r in results] == [{
        "mentorship_id": mentorship.id,
        "resulting_status": "at-risk",
        "counter_value": 2,
        "changed": True,
        "error": None,
    }]


def test_check_in_now_restores_active(db_session, engine, mentorship, make_goal, learner):
    goal = make_goal(mentorship, created_at=datetime(2026, 2, 25, 9, 0))
    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK

    activity_service.submit_check_in(
        db_session, goal.id, learner.id, ["practice joins"], engine=engine, now=NOW
    )

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.ACTIVE
    assert mentorship.consecutive_missed_weeks == 0
    entry = status_log.history(db_session, mentorship.id)[0]
    assert entry.previous_status == MentorshipStatus.AT_RISK
    assert entry.new_status == MentorshipStatus.ACTIVE
    assert entry.triggered_by == TriggeredBy.SYSTEM


def test_repeated_check_is_idempotent(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2026, 2, 25, 9, 0))
    logs_before = _logs(db_session, mentorship.id)

    engine.process_mentorship(db_session, mentorship.id, now=NOW)
    first_status = mentorship.status
    engine.process_mentorship(db_session, mentorship.id, now=NOW)

    assert mentorship.status == first_status == MentorshipStatus.AT_RISK
    assert _logs(db_session, mentorship.id) == logs_before + 1


def test_walk_stops_at_last_check_in(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=datetime(2026, 1, 1))
    _add_check_in(db_session, goal, datetime(2026, 2, 18))  # three weeks back

    measurement = engine.policy.measure(db_session, mentorship, NOW)

    assert measurement.missed_weeks == 2


def test_walk_is_capped_at_four_weeks(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2025, 6, 1))

    assert engine.policy.measure(db_session, mentorship, NOW).missed_weeks == 4


def test_current_week_check_in_means_no_missed_weeks(db_session, engine, mentorship, make_goal):
    goal = make_goal(mentorship, created_at=datetime(2026, 1, 1))
    _add_check_in(db_session, goal, NOW, submitted_at=NOW)

    assert engine.policy.measure(db_session, mentorship, NOW).missed_weeks == 0


def test_no_active_goals_is_never_penalised(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2025, 6, 1), status=GoalStatus.COMPLETED)

    engine.process_all(db_session, now=NOW)

    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.ACTIVE
    assert mentorship.consecutive_missed_weeks == 0


def test_active_goes_at_risk_before_paused(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2025, 6, 1))

    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.AT_RISK

    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)
    assert mentorship.status == MentorshipStatus.PAUSED
    assert mentorship.consecutive_missed_weeks == 4


def test_paused_mentorships_are_not_swept(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2025, 6, 1))
    status_log.transition(db_session, mentorship, MentorshipStatus.PAUSED, "Holiday", TriggeredBy.MENTOR)
    db_session.commit()

    assert engine.process_all(db_session, now=NOW) == []


def test_progress_update_does_not_reset_check_in_counter(db_session, engine, mentorship, make_goal):
    make_goal(mentorship, created_at=datetime(2026, 2, 25, 9, 0))
    engine.process_all(db_session, now=NOW)
    db_session.refresh(mentorship)

    restored = engine.register_activity(db_session, mentorship, InactivitySignal.PROGRESS_UPDATE, NOW)
    db_session.commit()

    assert restored is False
    assert mentorship.status == MentorshipStatus.AT_RISK
    assert mentorship.consecutive_missed_weeks == 2


class _ExplodingPolicy(CheckInPolicy):
    def __init__(self, broken_id):
        self.broken_id = broken_id

    def measure(self, db, mentorship, now):
        if mentorship.id == self.broken_id:
            raise RuntimeError("store unavailable")
        return super().measure(db, mentorship, now)


def test_sweep_collects_errors_and_continues(db_session, make_mentor, make_active_mentorship, make_goal):
    mentor = make_mentor(capacity=5)
    broken = make_active_mentorship(mentor)
    healthy = make_active_mentorship(mentor)
    make_goal(broken, created_at=datetime(2026, 2, 25, 9, 0))
    make_goal(healthy, created_at=datetime(2026, 2, 25, 9, 0))

    results = InactivityEngine(_ExplodingPolicy(broken.id)).process_all(db_session, now=NOW)

    by_id = {r.mentorship_id: r for r in results}
    assert by_id[broken.id].error == "store unavailable"
    assert by_id[broken.id].resulting_status == MentorshipStatus.ACTIVE
    assert by_id[healthy.id].error is None
    assert by_id[healthy.id].resulting_status == MentorshipStatus.AT_RISK
