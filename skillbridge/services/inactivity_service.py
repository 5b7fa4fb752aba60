# skillbridge/services/inactivity_service.py
"""
Inactivity Engine
System-enforced accountability for active mentorships.

Two activity signals exist. Exactly one is authoritative at a time
(``settings.INACTIVITY_SIGNAL``):

- check_in (default): consecutive fully elapsed weeks without a weekly
  check-in. 2 missed weeks -> at-risk, 3 missed weeks while at-risk -> paused.
- progress_update: days since the last progress update on any goal.
  7+ days -> at-risk, 14+ days -> paused (directly from active too).

Activity on the authoritative signal resets the counter and restores an
at-risk mentorship to active. Only a mentor can resume a paused one.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from skillbridge.config import settings
from skillbridge.crud import activity as activity_crud
from skillbridge.crud import mentorship as mentorship_crud
from skillbridge.models.activity import GoalStatus
from skillbridge.models.mentorship import (
    MONITORED_STATUSES,
    Mentorship,
    MentorshipStatus,
    TriggeredBy,
)
from skillbridge.services import status_log
from skillbridge.utils.temporal import previous_weeks, utcnow, week_boundaries, whole_days_between

logger = logging.getLogger(__name__)


class InactivitySignal(str, enum.Enum):
    CHECK_IN = "check_in"
    PROGRESS_UPDATE = "progress_update"


@dataclass
class InactivityMeasurement:
    """Counters behind an inactivity decision; snapshotted into the status log."""
    missed_weeks: int = 0
    days_since_update: Optional[int] = None
    last_activity_at: Optional[datetime] = None

    def as_context(self) -> Dict[str, Any]:
        return {
            "consecutive_missed_weeks": self.missed_weeks,
            "days_since_update": self.days_since_update,
            "last_activity_date": self.last_activity_at,
        }


@dataclass
class SweepResult:
    mentorship_id: int
    resulting_status: Optional[MentorshipStatus]
    counter_value: Optional[int]
    changed: bool = False
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "mentorship_id": self.mentorship_id,
            "resulting_status": self.resulting_status.value if self.resulting_status else None,
            "counter_value": self.counter_value,
            "changed": self.changed,
            "error": self.error,
        }


Decision = Optional[Tuple[MentorshipStatus, str]]


# =====================================
# POLICIES
# =====================================

class CheckInPolicy:
    """Weekly check-in consistency."""
    signal = InactivitySignal.CHECK_IN
    AT_RISK_AFTER_WEEKS = 2
    PAUSE_AFTER_WEEKS = 3
    LOOKBACK_WEEKS = 4
    RESTORED_REASON = "Weekly check-in submitted, mentorship restored to active"

    def measure(self, db: Session, mentorship: Mentorship, now: datetime) -> InactivityMeasurement:
        last_check_in = activity_crud.get_last_check_in_at(db, mentorship.id)
        goals = activity_crud.get_goals_for_mentorship(db, mentorship.id, status=GoalStatus.ACTIVE)
        if not goals:
            # Nothing to check in against yet
            return InactivityMeasurement(missed_weeks=0, last_activity_at=last_check_in)

        week_start, week_end = week_boundaries(now)
        if activity_crud.get_mentorship_check_ins_for_week(db, mentorship.id, week_start, week_end):
            return InactivityMeasurement(missed_weeks=0, last_activity_at=last_check_in)

        tracking_since = min(goal.created_at for goal in goals)
        missed = 0
        for week_start, week_end in previous_weeks(now, self.LOOKBACK_WEEKS):
            if week_end < tracking_since:
                break
            if activity_crud.get_mentorship_check_ins_for_week(db, mentorship.id, week_start, week_end):
                break
            missed += 1

        return InactivityMeasurement(missed_weeks=missed, last_activity_at=last_check_in)

    def decide(self, status: MentorshipStatus, measurement: InactivityMeasurement) -> Decision:
        missed = measurement.missed_weeks
        if status == MentorshipStatus.AT_RISK and missed >= self.PAUSE_AFTER_WEEKS:
            return (
                MentorshipStatus.PAUSED,
                f"Mentorship paused: {missed} consecutive weeks without a check-in",
            )
        if status == MentorshipStatus.ACTIVE and missed >= self.AT_RISK_AFTER_WEEKS:
            return (
                MentorshipStatus.AT_RISK,
                f"Inactivity warning: {missed} consecutive weeks without a check-in",
            )
        return None


class ProgressUpdatePolicy:
    """Recency of the last progress update on any of the mentorship's goals."""
    signal = InactivitySignal.PROGRESS_UPDATE
    AT_RISK_AFTER_DAYS = 7
    PAUSE_AFTER_DAYS = 14
    RESTORED_REASON = "Progress update submitted, mentorship restored to active"

    def measure(self, db: Session, mentorship: Mentorship, now: datetime) -> InactivityMeasurement:
        goals = activity_crud.get_goals_for_mentorship(db, mentorship.id)
        if not goals:
            # No goals set by mentor yet - don't penalize learner
            return InactivityMeasurement(missed_weeks=0, days_since_update=0)

        latest = activity_crud.get_latest_progress_update(db, [goal.id for goal in goals])
        if latest is None:
            oldest_goal = min(goals, key=lambda goal: goal.created_at)
            days = whole_days_between(oldest_goal.created_at, now)
            last_activity = None
        else:
            days = whole_days_between(latest.created_at, now)
            last_activity = latest.created_at

        days = max(days, 0)
        return InactivityMeasurement(
            missed_weeks=days // 7,
            days_since_update=days,
            last_activity_at=last_activity,
        )

    def decide(self, status: MentorshipStatus, measurement: InactivityMeasurement) -> Decision:
        days = measurement.days_since_update or 0
        if days >= self.PAUSE_AFTER_DAYS and status in MONITORED_STATUSES:
            return (
                MentorshipStatus.PAUSED,
                f"Mentorship paused: {days} days without progress update",
            )
        if days >= self.AT_RISK_AFTER_DAYS and status == MentorshipStatus.ACTIVE:
            return (
                MentorshipStatus.AT_RISK,
                f"Inactivity warning: {days} days without progress update",
            )
        return None


POLICIES = {
    InactivitySignal.CHECK_IN: CheckInPolicy,
    InactivitySignal.PROGRESS_UPDATE: ProgressUpdatePolicy,
}


# =====================================
# ENGINE
# =====================================

class InactivityEngine:
    def __init__(self, policy=None, clock: Callable[[], datetime] = utcnow):
        self.policy = policy or CheckInPolicy()
        self.clock = clock

    @property
    def signal(self) -> InactivitySignal:
        return self.policy.signal

    def evaluate(self, db: Session, mentorship: Mentorship, now: Optional[datetime] = None) -> bool:
        """
        Recompute the counter and apply any resulting transition.
        Does not commit.

        Returns:
            True if the mentorship changed status
        """
        if mentorship.status not in MONITORED_STATUSES:
            return False

        now = now or self.clock()
        measurement = self.policy.measure(db, mentorship, now)
        mentorship.consecutive_missed_weeks = measurement.missed_weeks

        decision = self.policy.decide(MentorshipStatus(mentorship.status), measurement)
        if decision is None:
            return False

        new_status, reason = decision
        return status_log.transition(
            db,
            mentorship,
            new_status,
            reason,
            TriggeredBy.SYSTEM,
            context=measurement.as_context(),
        )

    def register_activity(
        self,
        db: Session,
        mentorship: Mentorship,
        signal: InactivitySignal,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Reset inactivity after a qualifying learner submission. Does not commit.

        Activity on the non-authoritative signal is ignored so the two
        definitions never disagree about the same mentorship.

        Returns:
            True if the mentorship was restored from at-risk to active
        """
        if InactivitySignal(signal) != self.signal:
            logger.debug(
                "Ignoring %s activity for mentorship %s (authoritative signal is %s)",
                InactivitySignal(signal).value, mentorship.id, self.signal.value,
            )
            return False

        now = now or self.clock()
        mentorship.consecutive_missed_weeks = 0
        if mentorship.status != MentorshipStatus.AT_RISK:
            return False

        return status_log.transition(
            db,
            mentorship,
            MentorshipStatus.ACTIVE,
            self.policy.RESTORED_REASON,
            TriggeredBy.SYSTEM,
            context={"consecutive_missed_weeks": 0, "last_activity_date": now},
        )

    def process_mentorship(
        self,
        db: Session,
        mentorship_id: int,
        now: Optional[datetime] = None,
    ) -> Optional[Mentorship]:
        """
        Check one mentorship on demand (e.g. on dashboard load) and commit.

        Returns:
            The mentorship, or None if it does not exist
        """
        mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
        if mentorship is None:
            return None

        try:
            self.evaluate(db, mentorship, now)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(mentorship)
        return mentorship

    def process_all(self, db: Session, now: Optional[datetime] = None) -> List[SweepResult]:
        """
        Sweep every active/at-risk mentorship.

        Each mentorship is committed independently; a failure is rolled back,
        logged and reported in its result without stopping the sweep.
        """
        now = now or self.clock()
        targets = [
            (mentorship.id, mentorship.status)
            for mentorship in mentorship_crud.get_mentorships_by_status(db, MONITORED_STATUSES)
        ]

        results = []
        for mentorship_id, previous_status in targets:
            try:
                mentorship = mentorship_crud.get_mentorship(db, mentorship_id)
                if mentorship is None:
                    results.append(SweepResult(mentorship_id, None, None, error="Mentorship not found"))
                    continue
                changed = self.evaluate(db, mentorship, now)
                db.commit()
                results.append(SweepResult(
                    mentorship_id=mentorship_id,
                    resulting_status=MentorshipStatus(mentorship.status),
                    counter_value=mentorship.consecutive_missed_weeks,
                    changed=changed,
                ))
            except Exception as exc:
                db.rollback()
                logger.exception("Inactivity check failed for mentorship %s", mentorship_id)
                results.append(SweepResult(
                    mentorship_id=mentorship_id,
                    resulting_status=MentorshipStatus(previous_status),
                    counter_value=None,
                    error=str(exc),
                ))

        logger.info(
            "Inactivity sweep (%s): processed=%d changed=%d failed=%d",
            self.signal.value,
            len(results),
            sum(1 for r in results if r.changed),
            sum(1 for r in results if r.error),
        )
        return results


def get_inactivity_engine(signal: Optional[str] = None) -> InactivityEngine:
    """Engine for the configured authoritative signal."""
    chosen = InactivitySignal(signal or settings.INACTIVITY_SIGNAL)
    return InactivityEngine(POLICIES[chosen]())
