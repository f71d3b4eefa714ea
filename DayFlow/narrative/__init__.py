from DayFlow.narrative.client import GeminiTextClient
from DayFlow.narrative.debounce import SuggestionDebouncer
from DayFlow.narrative.flows import NarrativeService

__all__ = ["GeminiTextClient", "NarrativeService", "SuggestionDebouncer"]
