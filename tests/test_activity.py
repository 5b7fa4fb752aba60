# tests/test_activity.py
"""
Goals, progress updates, weekly check-ins and the views built on them
"""

from datetime import datetime, timedelta

import pytest

from skillbridge.crud import activity as activity_crud
from skillbridge.models.activity import GoalStatus
from skillbridge.models.user import UserRole
from skillbridge.services import activity_service, lifecycle_service
from skillbridge.services.errors import DomainError, ErrorKind
from skillbridge.services.inactivity_service import InactivityEngine

NOW = datetime(2026, 3, 11, 12, 0, 0)


@pytest.fixture
def goal(make_goal, mentorship):
    return make_goal(mentorship, created_at=datetime(2026, 2, 20, 10, 0))


def _check_in(db, goal, **kwargs):
    kwargs.setdefault("planned_tasks", ["Read chapter 3"])
    kwargs.setdefault("now", NOW)
    return activity_service.submit_check_in(
        db, goal.id, goal.learner_id, engine=InactivityEngine(), **kwargs
    )


def _error_kind(func, *args, **kwargs):
    with pytest.raises(DomainError) as exc:
        func(*args, **kwargs)
    return exc.value.kind


# ======================
# GOALS
# ======================

def test_mentor_creates_goal(db_session, mentorship, mentor, learner):
    goal = activity_service.create_goal(db_session, mentorship.id, mentor.id, " Learn SQL ", "Finish the course")

    assert goal.title == "Learn SQL"
    assert goal.learner_id == learner.id
    assert goal.status == GoalStatus.ACTIVE


def test_learner_cannot_create_goal(db_session, mentorship, learner):
    kind = _error_kind(activity_service.create_goal, db_session, mentorship.id, learner.id, "Title", "Desc")

    assert kind == ErrorKind.UNAUTHORIZED


def test_goal_needs_title(db_session, mentorship, mentor):
    kind = _error_kind(activity_service.create_goal, db_session, mentorship.id, mentor.id, "  ", "Desc")

    assert kind == ErrorKind.VALIDATION_FAILED


def test_no_goals_on_completed_mentorship(db_session, mentorship, mentor):
    lifecycle_service.complete_by_mentor(db_session, mentorship.id, mentor.id, "goals_achieved")

    kind = _error_kind(activity_service.create_goal, db_session, mentorship.id, mentor.id, "Title", "Desc")

    assert kind == ErrorKind.INVALID_STATE


def test_goal_status_update_and_listing(db_session, mentorship, goal, learner, make_user):
    updated = activity_service.update_goal_status(db_session, goal.id, learner.id, GoalStatus.COMPLETED)
    assert updated.status == GoalStatus.COMPLETED

    assert _error_kind(
        activity_service.update_goal_status, db_session, goal.id, learner.id, "abandoned"
    ) == ErrorKind.VALIDATION_FAILED
    assert [g.id for g in activity_service.list_goals(db_session, mentorship.id, learner.id)] == [goal.id]
    assert _error_kind(
        activity_service.list_goals, db_session, mentorship.id, make_user(UserRole.LEARNER).id
    ) == ErrorKind.UNAUTHORIZED


# ======================
# PROGRESS UPDATES
# ======================

def test_progress_update_is_stored(db_session, goal, learner, mentor):
    update = activity_service.add_progress_update(db_session, goal.id, learner.id, "  Finished joins  ")

    assert update.content == "Finished joins"
    assert [u.id for u in activity_service.list_progress_updates(db_session, goal.id, mentor.id)] == [update.id]


def test_progress_update_validation(db_session, goal, learner, mentor):
    assert _error_kind(
        activity_service.add_progress_update, db_session, goal.id, learner.id, "   "
    ) == ErrorKind.VALIDATION_FAILED
    assert _error_kind(
        activity_service.add_progress_update, db_session, goal.id, learner.id, "x" * 1001
    ) == ErrorKind.VALIDATION_FAILED
    assert _error_kind(
        activity_service.add_progress_update, db_session, goal.id, mentor.id, "Not mine"
    ) == ErrorKind.UNAUTHORIZED


# ======================
# CHECK-INS
# ======================

def test_check_in_for_current_week(db_session, goal):
    check_in = _check_in(db_session, goal, completed_tasks=["Intro", " "], blockers=" none ")

    assert check_in.week_start_date == datetime(2026, 3, 9)
    assert check_in.week_end_date == datetime(2026, 3, 15, 23, 59, 59, 999999)
    assert check_in.completed_tasks == ["Intro"]
    assert check_in.blockers == "none"
    assert check_in.is_late is False


def test_check_in_for_past_week_is_late(db_session, goal):
    check_in = _check_in(db_session, goal, week_start_date=datetime(2026, 3, 4))

    assert check_in.week_start_date == datetime(2026, 3, 2)
    assert check_in.is_late is True


def test_second_check_in_same_week_is_duplicate(db_session, goal):
    _check_in(db_session, goal)

    kind = _error_kind(_check_in, db_session, goal, week_start_date=datetime(2026, 3, 13))

    assert kind == ErrorKind.DUPLICATE_ACTIVE
    assert len(activity_crud.get_check_ins_for_goal(db_session, goal.id)) == 1


def test_future_week_is_rejected(db_session, goal):
    kind = _error_kind(_check_in, db_session, goal, week_start_date=NOW + timedelta(days=7))

    assert kind == ErrorKind.VALIDATION_FAILED


@pytest.mark.parametrize("fields", [
    {"planned_tasks": []},
    {"planned_tasks": ["  "]},
    {"planned_tasks": [f"task {i}" for i in range(11)]},
    {"completed_tasks": [f"task {i}" for i in range(11)]},
    {"blockers": "x" * 501},
])
def test_check_in_field_limits(db_session, goal, fields):
    assert _error_kind(_check_in, db_session, goal, **fields) == ErrorKind.VALIDATION_FAILED


def test_no_check_in_while_paused(db_session, mentorship, mentor, goal):
    lifecycle_service.pause_by_mentor(db_session, mentorship.id, mentor.id, "Vacation")

    assert _error_kind(_check_in, db_session, goal) == ErrorKind.INVALID_STATE


def test_no_check_in_for_completed_goal(db_session, goal, learner):
    activity_service.update_goal_status(db_session, goal.id, learner.id, GoalStatus.COMPLETED)

    assert _error_kind(_check_in, db_session, goal) == ErrorKind.INVALID_STATE


def test_only_goal_owner_checks_in(db_session, goal, make_user):
    kind = _error_kind(
        activity_service.submit_check_in,
        db_session, goal.id, make_user(UserRole.LEARNER).id, ["task"], now=NOW,
    )

    assert kind == ErrorKind.UNAUTHORIZED


# ======================
# TIMELINE & SUMMARY
# ======================

def test_goal_timeline_labels_each_week(db_session, goal, learner):
    _check_in(db_session, goal, week_start_date=datetime(2026, 3, 2), now=datetime(2026, 3, 4, 9, 0))
    _check_in(db_session, goal, week_start_date=datetime(2026, 2, 23))

    result = activity_service.get_goal_timeline(db_session, goal.id, learner.id, weeks_back=6, now=NOW)

    assert result["goal"]["id"] == goal.id
    assert [(w["week_start"], w["status"]) for w in result["timeline"]] == [
        (datetime(2026, 3, 9), "current"),
        (datetime(2026, 3, 2), "submitted"),
        (datetime(2026, 2, 23), "late"),
        (datetime(2026, 2, 16), "missed"),
    ]
    assert result["timeline"][1]["check_in"]["is_late"] is False
    assert result["timeline"][3]["check_in"] is None


def test_consistency_summary_for_mentor(db_session, mentorship, goal, mentor, learner):
    activity_crud.create_progress_update(db_session, goal.id, learner.id, "Old news", created_at=NOW - timedelta(days=40))
    activity_crud.create_progress_update(db_session, goal.id, learner.id, "Recent", created_at=NOW - timedelta(days=3))
    db_session.commit()

    summary = activity_service.get_learner_consistency_summary(db_session, mentorship.id, mentor.id, now=NOW)

    assert summary["learner"] == {"id": learner.id, "name": learner.name}
    assert [u["content"] for u in summary["progress_updates"]] == ["Recent"]
    assert summary["progress_updates"][0]["goal"] == {"id": goal.id, "title": goal.title}
    assert summary["mentorship"]["days_since_last_update"] == 3
    assert summary["stats"]["total_goals"] == 1
    assert summary["stats"]["active_goals"] == 1
    assert summary["stats"]["total_progress_updates"] == 1
