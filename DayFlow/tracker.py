from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from DayFlow.config import Settings
from DayFlow.database import KeyValueStore
from DayFlow.models import CategoryTime, ReportRow, day_key
from DayFlow.store.activities import ActivityLogStore
from DayFlow.store.categories import CategoryStore
from DayFlow.summary.csv_export import Narrative, export_csv
from DayFlow.summary.report import project_for_narrative
from DayFlow.summary.stats import aggregate

log = logging.getLogger(__name__)


def today(settings: Settings) -> date:
    if settings.local_tz:
        try:
            return datetime.now(ZoneInfo(settings.local_tz)).date()
        except ZoneInfoNotFoundError:
            log.warning(f"Timezone '{settings.local_tz}' not found. Using system local time.")
    return date.today()


class DayTracker:
    """
    Wires the stores to one storage file and exposes the derived views
    (time allocation, report rows, CSV) for a given day.
    """

    def __init__(self, settings: Settings, kv: Optional[KeyValueStore] = None):
        self.settings = settings
        self.kv = kv or KeyValueStore(settings.db_path)
        self.activities = ActivityLogStore(self.kv)
        self.categories = CategoryStore(self.kv, self.activities)

    def today_key(self) -> str:
        return day_key(today(self.settings))

    def category_times(self, key: str) -> List[CategoryTime]:
        return aggregate(self.activities.get_day(key), self.categories.list_categories())

    def report_rows(self, key: str) -> List[ReportRow]:
        return project_for_narrative(self.activities.get_day(key), self.categories.list_categories())

    def export_csv(self, key: str, narratives: Optional[Iterable[Narrative]] = None) -> str:
        return export_csv(key, self.activities.get_day(key), self.categories.list_categories(), narratives)

    def close(self) -> None:
        self.kv.close()
