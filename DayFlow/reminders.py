"""
Quarter-hour reminders.
Fires a notification near every :00/:15/:30/:45 boundary so the user can fill
in the matching 15-minute note. Does not touch stored data.
"""
import logging
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

log = logging.getLogger(__name__)

INTERVAL = timedelta(minutes=15)
JOB_ID = "quarter_hour_reminder"

Notify = Callable[[int, int], None]  # (hour, interval_index)


def next_boundary(now: datetime) -> datetime:
    """First quarter-hour boundary strictly after `now`."""
    floor = now.replace(minute=(now.minute // 15) * 15, second=0, microsecond=0)
    return floor + INTERVAL


def nearest_boundary(moment: datetime) -> datetime:
    floor = moment.replace(minute=(moment.minute // 15) * 15, second=0, microsecond=0)
    return floor + INTERVAL if moment - floor >= INTERVAL / 2 else floor


class ReminderScheduler:
    def __init__(self, notify: Notify, lead_seconds: int = 0, tz: Optional[tzinfo] = None):
        if not 0 <= lead_seconds < INTERVAL.total_seconds():
            raise ValueError(f"lead_seconds must be in [0, {int(INTERVAL.total_seconds())}), got {lead_seconds}")
        self.notify = notify
        self.lead = timedelta(seconds=lead_seconds)
        self.tz = tz
        self._lock = threading.RLock()
        self._enabled = False
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _now(self) -> datetime:
        return datetime.now(self.tz)

    def first_fire_time(self, now: Optional[datetime] = None) -> datetime:
        now = now or self._now()
        fire = next_boundary(now) - self.lead
        while fire <= now:
            fire += INTERVAL
        return fire

    def enable(self) -> None:
        with self._lock:
            if self._enabled:
                return
            self._enabled = True
            scheduler = BackgroundScheduler(timezone=self.tz) if self.tz else BackgroundScheduler()
            scheduler.add_job(
                self._fire,
                trigger=IntervalTrigger(minutes=15, start_date=self.first_fire_time()),
                id=JOB_ID,
                name="Quarter-hour reminder",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=60,
            )
            scheduler.start()
            self._scheduler = scheduler
        log.info(f"Reminders enabled (lead {int(self.lead.total_seconds())}s)")

    def disable(self) -> None:
        """After this returns no further notification is delivered."""
        with self._lock:
            if not self._enabled:
                return
            self._enabled = False
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            try:
                scheduler.remove_job(JOB_ID)
            except Exception as e:
                log.debug(f"Reminder job already gone: {e}")
            scheduler.shutdown(wait=False)
        log.info("Reminders disabled")

    def _fire(self) -> None:
        # The lock makes disable() wait for a notification in progress.
        with self._lock:
            if not self._enabled:
                return
            boundary = nearest_boundary(self._now() + self.lead)
            try:
                self.notify(boundary.hour, boundary.minute // 15)
            except Exception as e:
                log.error(f"Reminder notification failed: {e}", exc_info=True)
