"""
Per-day activity logs: 24 hourly records per calendar day, each with a
description, category reference, priority and four 15-minute notes.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from DayFlow.database import KeyValueStore
from DayFlow.errors import RangeError, ValidationError
from DayFlow.models import (
    HOURS_PER_DAY,
    INTERVALS_PER_HOUR,
    ActivityLog,
    default_day,
    load_day,
    parse_day_key,
)

log = logging.getLogger(__name__)

ACTIVITY_LOG_PREFIX = "dayflow_activities_"

# Public field name -> ActivityLog attribute
EDITABLE_FIELDS = {
    "description": "description",
    "categoryId": "category_id",
    "category_id": "category_id",
    "priority": "priority",
}


def activities_storage_key(key: str) -> str:
    return f"{ACTIVITY_LOG_PREFIX}{key}"


def _check_hour(hour: Any) -> int:
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour < HOURS_PER_DAY:
        raise RangeError(f"Hour must be an integer in 0..{HOURS_PER_DAY - 1}, got {hour!r}")
    return hour


def _check_interval(index: Any) -> int:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < INTERVALS_PER_HOUR:
        raise RangeError(f"Interval index must be an integer in 0..{INTERVALS_PER_HOUR - 1}, got {index!r}")
    return index


class ActivityLogStore:
    """
    Reads and writes day collections. Days that were loaded or mutated in this
    session are kept in memory; if a write fails the in-memory state stays the
    source of truth and StorageUnavailable is raised to the caller.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._days: Dict[str, List[ActivityLog]] = {}

    # --------------- reads ------------------------------------------------
    def get_day(self, key: str) -> List[ActivityLog]:
        """The day's 24 records. An unsaved day returns defaults without persisting them."""
        return [r.model_copy(deep=True) for r in self._records(key)]

    def saved_day_keys(self) -> List[str]:
        prefix_len = len(ACTIVITY_LOG_PREFIX)
        return [k[prefix_len:] for k in self.kv.keys(ACTIVITY_LOG_PREFIX)]

    def _records(self, key: str) -> List[ActivityLog]:
        parse_day_key(key)
        if key in self._days:
            return self._days[key]

        records = self._load(key)
        if records is None:
            return default_day()
        self._days[key] = records
        return records

    def _load(self, key: str) -> Optional[List[ActivityLog]]:
        """Stored records for a day, or None when nothing readable is saved. Does not cache."""
        raw = self.kv.get(activities_storage_key(key))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning(f"Stored activities for {key} are not valid JSON ({e}). Using an empty day.")
            return None
        if not isinstance(data, list):
            log.warning(f"Stored activities for {key} are not a list. Using an empty day.")
            return None
        return load_day(data)

    # --------------- writes -----------------------------------------------
    def set_field(self, key: str, hour: int, field: str, value: Any) -> ActivityLog:
        """Replace one field of one hour. Empty strings clear categoryId / priority."""
        _check_hour(hour)
        attr = EDITABLE_FIELDS.get(field)
        if attr is None:
            raise ValidationError(f"Unknown activity field '{field}'. Expected one of: description, categoryId, priority.")

        records = list(self._records(key))
        current = records[hour]
        try:
            updated = ActivityLog.model_validate({**current.model_dump(), attr: value})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid value {value!r} for '{field}': {e.errors()[0]['msg']}") from e

        records[hour] = updated
        self._commit(key, records)
        log.debug(f"{key} {hour:02d}:00 {field} set")
        return updated.model_copy(deep=True)

    def set_interval_note(self, key: str, hour: int, interval_index: int, text: str) -> ActivityLog:
        """Replace one of the four 15-minute notes of an hour."""
        _check_hour(hour)
        _check_interval(interval_index)

        records = list(self._records(key))
        current = records[hour]
        notes = list(current.notes_15min)
        notes[interval_index] = "" if text is None else str(text)
        updated = current.model_copy(update={"notes_15min": notes})

        records[hour] = updated
        self._commit(key, records)
        log.debug(f"{key} {hour:02d}:{interval_index * 15:02d} note set")
        return updated.model_copy(deep=True)

    def _commit(self, key: str, records: List[ActivityLog]) -> None:
        self._days[key] = records
        self._save(key, records)

    def _save(self, key: str, records: List[ActivityLog]) -> None:
        payload = json.dumps([r.to_storage() for r in records])
        self.kv.put(activities_storage_key(key), payload)

    # --------------- category cascade ---------------------------------------
    def plan_category_clear(self, category_id: str) -> Dict[str, List[ActivityLog]]:
        """
        New collections for every saved or in-memory day that references
        category_id, with those references cleared. Nothing is mutated.
        """
        plan: Dict[str, List[ActivityLog]] = {}
        for key in sorted(set(self._days) | set(self.saved_day_keys())):
            records = self._days.get(key)
            if records is None:
                # Days outside the session are read once and only cached if planned
                records = self._load(key)
            if records is None:
                continue
            if not any(r.category_id == category_id for r in records):
                continue
            plan[key] = [
                r.model_copy(update={"category_id": None}) if r.category_id == category_id else r
                for r in records
            ]
        return plan

    def save_days(self, days: Dict[str, List[ActivityLog]]) -> None:
        """Write collections to storage only. Run inside the caller's transaction."""
        for key, records in days.items():
            self._save(key, records)

    def cache_days(self, days: Dict[str, List[ActivityLog]]) -> None:
        self._days.update(days)
