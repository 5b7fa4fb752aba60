# skillbridge/utils/temporal.py
"""
Calendar helpers shared by the accountability engine.

Weeks run Monday 00:00:00 to Sunday 23:59:59.999999. All datetimes are
naive and interpreted as UTC wall-clock time; no timezone conversion is
performed beyond calendar-day arithmetic.
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import Optional, Tuple, Union

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def _as_datetime(moment: Union[date, datetime]) -> datetime:
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            return moment.astimezone(UTC).replace(tzinfo=None)
        return moment
    return datetime.combine(moment, time.min)


def week_boundaries(moment: Union[date, datetime, None] = None) -> Tuple[datetime, datetime]:
    """
    Return the Monday-to-Sunday week containing ``moment``.

    Args:
        moment: Any date or datetime (defaults to now)

    Returns:
        (week_start, week_end) where week_start is Monday 00:00:00.000000 and
        week_end is the following Sunday 23:59:59.999999
    """
    current = _as_datetime(moment if moment is not None else utcnow())
    monday = current.date() - timedelta(days=current.weekday())
    week_start = datetime.combine(monday, time.min)
    week_end = datetime.combine(monday + timedelta(days=6), time.max)
    return week_start, week_end


def days_ago(days: int, now: Optional[datetime] = None) -> datetime:
    """Midnight ``days`` calendar days before ``now``."""
    current = _as_datetime(now if now is not None else utcnow())
    return datetime.combine(current.date() - timedelta(days=days), time.min)


def whole_days_between(earlier: datetime, later: datetime) -> int:
    """Number of full 24h periods elapsed from ``earlier`` to ``later``."""
    delta = _as_datetime(later) - _as_datetime(earlier)
    return int(delta.total_seconds() // SECONDS_PER_DAY)


def is_submission_late(week_end: datetime, submitted_at: datetime) -> bool:
    return _as_datetime(submitted_at) > week_end


def previous_weeks(now: Optional[datetime] = None, count: int = 1):
    """
    Yield (week_start, week_end) for the ``count`` weeks before the one
    containing ``now``, most recent first.
    """
    current = _as_datetime(now if now is not None else utcnow())
    for offset in range(1, count + 1):
        yield week_boundaries(current - timedelta(days=7 * offset))
