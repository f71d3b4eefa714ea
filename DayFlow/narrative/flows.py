from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from DayFlow import prompts
from DayFlow.config import Settings
from DayFlow.errors import CollaboratorError, RangeError
from DayFlow.models import HOURS_PER_DAY, GrowthReport, ReportRow, SummaryReport
from DayFlow.narrative.client import GeminiTextClient
from DayFlow.summary.report import fallback_summary, serialize_tracking_data

log = logging.getLogger(__name__)

NO_DATA_NOTICE = "Please log some activities before generating a report."


class NarrativeService:
    """
    Summaries, growth reports and description suggestions from the text generator.
    Failures never propagate: the caller gets a default result and
    `last_notice` holds a short message to show the user.
    """

    def __init__(self, settings: Settings, client: Optional[GeminiTextClient] = None):
        self.settings = settings
        self.client = client or GeminiTextClient(settings)
        self.last_notice: Optional[str] = None

    async def _ask(self, prompt: str) -> Any:
        return await asyncio.to_thread(self.client.generate_json, prompt)

    def _recover(self, what: str, error: Exception) -> None:
        log.warning(f"Text generation failed for {what}: {error}")
        self.last_notice = f"Failed to generate {what}. Please try again."

    # --------------- summary ----------------------------------------------
    async def summarize(self, rows: Sequence[ReportRow]) -> SummaryReport:
        self.last_notice = None
        if not rows:
            self.last_notice = NO_DATA_NOTICE
            return SummaryReport(summary_report=fallback_summary(rows))

        prompt = prompts.SUMMARY_REPORT_PROMPT.format(
            json_schema=prompts.SUMMARY_REPORT_JSON_SCHEMA.strip(),
            tracking_data=serialize_tracking_data(rows),
        )
        try:
            data = await self._ask(prompt)
            if not isinstance(data, dict):
                raise CollaboratorError("Summary response is not a JSON object.")
            report = SummaryReport.model_validate(data)
            if not report.summary_report.strip():
                raise CollaboratorError("Summary response has no summaryReport text.")
            return report
        except (CollaboratorError, PydanticValidationError) as e:
            self._recover("summary report", e)
            return SummaryReport(summary_report=fallback_summary(rows))

    # --------------- growth -----------------------------------------------
    async def analyze_growth(self, rows: Sequence[ReportRow]) -> GrowthReport:
        self.last_notice = None
        if not rows:
            self.last_notice = NO_DATA_NOTICE
            return GrowthReport()

        prompt = prompts.GROWTH_REPORT_PROMPT.format(
            json_schema=prompts.GROWTH_REPORT_JSON_SCHEMA.strip(),
            tracking_data=serialize_tracking_data(rows),
        )
        try:
            data = await self._ask(prompt)
            if not isinstance(data, dict):
                raise CollaboratorError("Growth response is not a JSON object.")
            suggestions = data.get("improvementSuggestions")
            if isinstance(suggestions, list):
                # Models sometimes return the bullet list as an array
                data = {**data, "improvementSuggestions": "\n".join(f"- {s}" for s in suggestions)}
            return GrowthReport.model_validate(data)
        except (CollaboratorError, PydanticValidationError) as e:
            self._recover("growth report", e)
            return GrowthReport()

    # --------------- suggestions ------------------------------------------
    async def suggest_continuations(self, partial_text: str, hour: Optional[int] = None) -> List[str]:
        """Empty input returns [] before the hour is checked or the model is called."""
        self.last_notice = None
        if not (partial_text or "").strip():
            return []
        if hour is not None and (isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour < HOURS_PER_DAY):
            raise RangeError(f"Hour must be an integer in 0..{HOURS_PER_DAY - 1}, got {hour!r}")

        hour_context = prompts.SUGGEST_HOUR_CONTEXT.format(hour=f"{hour:02d}") if hour is not None else ""
        prompt = prompts.SUGGEST_ACTIVITY_PROMPT.format(
            hour_context=hour_context,
            current_input=partial_text.replace('"', "'"),
            json_schema=prompts.SUGGESTIONS_JSON_SCHEMA.strip(),
        )
        try:
            data = await self._ask(prompt)
        except CollaboratorError as e:
            self._recover("suggestions", e)
            return []

        raw = data.get("suggestions") if isinstance(data, dict) else data
        if not isinstance(raw, list):
            self._recover("suggestions", CollaboratorError("Suggestion response has no list."))
            return []

        cleaned: List[str] = []
        for item in raw:
            if not isinstance(item, str):
                continue
            text = item.strip()
            if text and text not in cleaned:
                cleaned.append(text)
        return cleaned[: self.settings.max_suggestions]
