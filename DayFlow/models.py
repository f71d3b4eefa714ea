from __future__ import annotations

import logging
import re
from datetime import date
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from DayFlow.errors import ValidationError

log = logging.getLogger(__name__)

HOURS_PER_DAY = 24
INTERVALS_PER_HOUR = 4  # :00, :15, :30, :45

DEFAULT_ICON = "CircleDot"
ICON_NAMES = (
    "Briefcase", "BedDouble", "Gamepad2", "Dumbbell", "Home", "BookOpen",
    "Utensils", "ShoppingCart", "Plane", "Smile", "Pencil", "CircleDot",
)

UNCATEGORIZED_LABEL = "Uncategorized"
PRIORITY_NOT_SET_LABEL = "Not set"

_DAY_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Lower rank sorts first when picking key tasks.
PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def resolve_icon(name: Optional[str]) -> str:
    """Unknown icon names render as the default icon; they are not a data error."""
    return name if name in ICON_NAMES else DEFAULT_ICON


# --- Day Keys ---

def day_key(day: date) -> str:
    """Canonical YYYY-MM-DD key namespacing one calendar day's activities."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_day_key(value: str) -> date:
    if not isinstance(value, str) or not _DAY_KEY_RE.match(value):
        raise ValidationError(f"Invalid day key '{value}'. Please use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid day key '{value}': {e}") from e


# --- Stored Records ---

class Category(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    icon: str = DEFAULT_ICON


class ActivityLog(BaseModel):
    """
    One hour slot of one calendar day.
    Persisted with the camelCase keys (categoryId, notes15Min) of the stored JSON.
    """
    model_config = ConfigDict(populate_by_name=True)

    hour: int = Field(..., ge=0, le=HOURS_PER_DAY - 1)
    description: str = ""
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    priority: Optional[Priority] = None
    notes_15min: List[str] = Field(
        default_factory=lambda: [""] * INTERVALS_PER_HOUR, alias="notes15Min"
    )

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value):
        return "" if value is None else value

    @field_validator("category_id", "priority", mode="before")
    @classmethod
    def _empty_is_none(cls, value):
        # "" and null are the same "none" selection for these two fields
        return None if value == "" else value

    @field_validator("notes_15min", mode="before")
    @classmethod
    def _backfill_notes(cls, value):
        if value is None:
            return [""] * INTERVALS_PER_HOUR
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"notes15Min must be a list, got {type(value).__name__}")
        # Non-string items are left for the str check to reject
        notes = ["" if n is None else n for n in list(value)[:INTERVALS_PER_HOUR]]
        return notes + [""] * (INTERVALS_PER_HOUR - len(notes))

    def has_content(self) -> bool:
        """True when any of description, category or priority is set."""
        return bool(self.description or self.category_id or self.priority)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def default_day() -> List[ActivityLog]:
    return [ActivityLog(hour=h) for h in range(HOURS_PER_DAY)]


def load_day(raw: Iterable[Any]) -> List[ActivityLog]:
    """
    Rebuild a stored day into exactly 24 records, one per hour.
    Records saved before priority / notes15Min existed are backfilled,
    unreadable entries are skipped, missing hours get default records and
    a repeated hour keeps its last occurrence.
    """
    by_hour: dict[int, ActivityLog] = {}
    for item in raw:
        try:
            record = ActivityLog.model_validate(item)
        except PydanticValidationError as e:
            log.warning(f"Skipping unreadable activity record {item!r}: {e.error_count()} error(s)")
            continue
        by_hour[record.hour] = record
    return [by_hour.get(h) or ActivityLog(hour=h) for h in range(HOURS_PER_DAY)]


# --- Derived Views ---

class CategoryTime(BaseModel):
    id: str
    name: str
    icon: str = DEFAULT_ICON
    hours: int


class ReportRow(BaseModel):
    hour: int
    activity: str
    category: str
    priority: str


# --- Text Generation Outputs ---

class SummaryReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary_report: str = Field(default="", alias="summaryReport")


class GrowthReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    professional_growth_report: str = Field(default="", alias="professionalGrowthReport")
    improvement_suggestions: str = Field(default="", alias="improvementSuggestions")


class Suggestions(BaseModel):
    suggestions: List[str] = Field(default_factory=list)
