from functools import lru_cache
from typing import Optional

from DayFlow.config import Settings
from DayFlow.narrative.flows import NarrativeService
from DayFlow.tracker import DayTracker

_tracker: Optional[DayTracker] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_tracker() -> DayTracker:
    """
    One tracker (and one storage connection) per process.
    The in-memory day cache is the session's source of truth, so it must be shared.
    """
    global _tracker
    if _tracker is None:
        _tracker = DayTracker(get_settings())
    return _tracker


def get_narrative_service() -> NarrativeService:
    return NarrativeService(get_settings())


def close_tracker() -> None:
    global _tracker
    if _tracker is not None:
        _tracker.close()
        _tracker = None
