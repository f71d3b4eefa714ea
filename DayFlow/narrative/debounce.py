from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from DayFlow.narrative.flows import NarrativeService

log = logging.getLogger(__name__)

ResultCallback = Callable[[Optional[int], List[str]], None]


class SuggestionDebouncer:
    """
    Coalesces rapid edits of an hour's description into one suggestion request.

    Each `request` cancels the pending one and waits `delay_s` of quiet before
    asking the service. A result is delivered only if the active hour and the
    latest text still match what was requested; anything else is stale.
    """

    def __init__(self, service: NarrativeService, on_result: ResultCallback, delay_s: float = 0.5):
        self.service = service
        self.on_result = on_result
        self.delay_s = delay_s
        self._task: Optional[asyncio.Task] = None
        self._active_hour: Optional[int] = None
        self._latest_text = ""

    @classmethod
    def from_settings(cls, service: NarrativeService, on_result: ResultCallback) -> SuggestionDebouncer:
        return cls(service, on_result, delay_s=service.settings.suggestion_debounce_s)

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def set_active_hour(self, hour: Optional[int]) -> None:
        """Switch context; an in-flight result for another hour will be discarded."""
        self._active_hour = hour

    def request(self, hour: Optional[int], text: str) -> Optional[asyncio.Task]:
        """Must be called from a running event loop."""
        self._active_hour = hour
        self._latest_text = text
        self.cancel()

        if not (text or "").strip():
            self.on_result(hour, [])
            return None

        self._task = asyncio.get_running_loop().create_task(self._run(hour, text))
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    def _is_current(self, hour: Optional[int], text: str) -> bool:
        return self._active_hour == hour and self._latest_text == text

    async def _run(self, hour: Optional[int], text: str) -> Optional[List[str]]:
        await asyncio.sleep(self.delay_s)
        suggestions = await self.service.suggest_continuations(text, hour)
        if not self._is_current(hour, text):
            log.debug(f"Discarding stale suggestions for hour {hour} ({text!r})")
            return None
        self.on_result(hour, suggestions)
        return suggestions
