# skillbridge/services/scheduler.py
"""
Weekly inactivity sweep.

``InactivityScheduler`` registers the sweep as a cron job on an APScheduler
``BackgroundScheduler`` (Monday 09:00 UTC by default). It is created and
started by the application lifespan and stopped on shutdown; nothing here
runs at import time.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from skillbridge.config import settings
from skillbridge.database import SessionLocal
from skillbridge.services.inactivity_service import get_inactivity_engine
from skillbridge.utils.temporal import utcnow

logger = logging.getLogger(__name__)

JOB_ID = "inactivity-sweep"

# A missed weekly slot still runs once if the process comes back within the hour
MISFIRE_GRACE_SECONDS = 3600


def run_inactivity_sweep() -> List[Dict[str, Any]]:
    """
    Sweep every active or at-risk mentorship with the configured engine.

    Returns:
        One {mentorship_id, resulting_status, counter_value, changed, error}
        dict per mentorship
    """
    db = SessionLocal()
    try:
        results = get_inactivity_engine().process_all(db)
        return [result.as_dict() for result in results]
    finally:
        db.close()


def _naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class InactivityScheduler:
    def __init__(
        self,
        sweep: Callable[[], List[Dict[str, Any]]] = run_inactivity_sweep,
        weekday: int = 0,
        hour: int = 9,
        minute: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sweep = sweep
        self.weekday = weekday
        self.hour = hour
        self.minute = minute
        self.clock = clock

        self._run_lock = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None
        self.last_run: Optional[datetime] = None
        self.last_result: Optional[Dict[str, int]] = None
        self.last_error: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "InactivityScheduler":
        return cls(
            weekday=settings.SCHEDULER_WEEKDAY,
            hour=settings.SCHEDULER_HOUR,
            minute=settings.SCHEDULER_MINUTE,
        )

    @property
    def trigger(self) -> CronTrigger:
        """Cron slot for the sweep; APScheduler numbers weekdays from 0 = Monday."""
        return CronTrigger(day_of_week=self.weekday, hour=self.hour, minute=self.minute, timezone="UTC")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def job(self):
        if self._scheduler is None:
            return None
        return self._scheduler.get_job(JOB_ID)

    @property
    def next_run(self) -> Optional[datetime]:
        """Next scheduled sweep as naive UTC, None when stopped."""
        job = self.job
        return _naive_utc(job.next_run_time) if job is not None else None

    def start(self) -> None:
        if self.running:
            return
        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self.run_now,
            trigger=self.trigger,
            id=JOB_ID,
            name="Weekly inactivity sweep",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Inactivity scheduler started; next sweep at %s UTC", self.next_run.isoformat())

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Inactivity scheduler stopped")

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "schedule": {"weekday": self.weekday, "hour": self.hour, "minute": self.minute},
            "next_run": self.next_run,
            "last_run": self.last_run,
            "last_result": self.last_result,
            "last_error": self.last_error,
        }

    def run_now(self) -> List[Dict[str, Any]]:
        """Run one sweep immediately on the calling thread."""
        with self._run_lock:
            started = self.clock()
            logger.info("Running inactivity sweep")
            try:
                results = self.sweep()
            except Exception as exc:
                self.last_run = started
                self.last_error = str(exc)
                raise

            self.last_run = started
            self.last_error = None
            self.last_result = {
                "processed": len(results),
                "changed": sum(1 for r in results if r.get("changed")),
                "failed": sum(1 for r in results if r.get("error")),
            }
            logger.info(
                "Inactivity sweep complete: processed=%d changed=%d failed=%d",
                self.last_result["processed"],
                self.last_result["changed"],
                self.last_result["failed"],
            )
            return results
