# tests/test_status_log.py
"""
Status log: append-only ledger of mentorship transitions
"""

from datetime import datetime

import pytest

from skillbridge.models.mentorship import (
    ImmutableRecordError,
    MentorshipStatus,
    MentorshipStatusLog,
    TriggeredBy,
)
from skillbridge.services import status_log
from skillbridge.services.errors import DomainError, ErrorKind


def _log_count(db, mentorship_id):
    return db.query(MentorshipStatusLog).filter(
        MentorshipStatusLog.mentorship_id == mentorship_id
    ).count()


def test_accept_is_logged(db_session, mentorship, mentor):
    entries = status_log.history(db_session, mentorship.id)

    assert len(entries) == 1
    assert entries[0].previous_status == MentorshipStatus.PENDING
    assert entries[0].new_status == MentorshipStatus.ACTIVE
    assert entries[0].triggered_by == TriggeredBy.MENTOR
    assert entries[0].actor_id == mentor.id


def test_transition_changes_status_and_logs(db_session, mentorship):
    changed = status_log.transition(
        db_session,
        mentorship,
        MentorshipStatus.AT_RISK,
        "Inactivity warning",
        TriggeredBy.SYSTEM,
        context={"consecutive_missed_weeks": 2, "last_activity_date": datetime(2026, 3, 1, 10, 0)},
    )
    db_session.commit()

    assert changed is True
    assert mentorship.status == MentorshipStatus.AT_RISK
    latest = status_log.history(db_session, mentorship.id)[0]
    assert latest.previous_status == MentorshipStatus.ACTIVE
    assert latest.new_status == MentorshipStatus.AT_RISK
    assert latest.actor_id is None
    assert latest.system_context == {
        "consecutive_missed_weeks": 2,
        "last_activity_date": "2026-03-01T10:00:00",
    }


def test_same_status_transition_is_noop(db_session, mentorship):
    before = _log_count(db_session, mentorship.id)

    changed = status_log.transition(
        db_session, mentorship, MentorshipStatus.ACTIVE, "Still active", TriggeredBy.SYSTEM
    )
    db_session.commit()

    assert changed is False
    assert _log_count(db_session, mentorship.id) == before


@pytest.mark.parametrize("reason", ["", "   ", None, "x" * 501])
def test_record_rejects_bad_reason(db_session, mentorship, reason):
    with pytest.raises(DomainError) as exc_info:
        status_log.record(
            db_session,
            mentorship.id,
            MentorshipStatus.ACTIVE,
            MentorshipStatus.PAUSED,
            reason,
            TriggeredBy.MENTOR,
        )

    assert exc_info.value.kind == ErrorKind.VALIDATION_FAILED


def test_history_is_newest_first(db_session, mentorship):
    status_log.transition(db_session, mentorship, MentorshipStatus.AT_RISK, "first", TriggeredBy.SYSTEM)
    db_session.commit()
    status_log.transition(db_session, mentorship, MentorshipStatus.PAUSED, "second", TriggeredBy.SYSTEM)
    db_session.commit()

    reasons = [entry.reason for entry in status_log.history(db_session, mentorship.id)]

    assert reasons[:2] == ["second", "first"]


def test_log_entries_cannot_be_updated(db_session, mentorship):
    entry = status_log.history(db_session, mentorship.id)[0]
    entry.reason = "rewritten"

    with pytest.raises(ImmutableRecordError):
        db_session.commit()
    db_session.rollback()

    assert status_log.history(db_session, mentorship.id)[0].reason != "rewritten"


def test_log_entries_cannot_be_deleted(db_session, mentorship):
    entry = status_log.history(db_session, mentorship.id)[0]
    db_session.delete(entry)

    with pytest.raises(ImmutableRecordError):
        db_session.commit()
    db_session.rollback()

    assert _log_count(db_session, mentorship.id) == 1
