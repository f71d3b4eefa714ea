from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Core Paths ---
    db_path: Path = Path("DayFlow/storage/dayflow.db")
    export_dir: Path = Path("DayFlow/storage/exports")
    llm_cache_dir: Path = Path("DayFlow/storage/cache/llm_responses")

    # --- Text Generation (Gemini) ---
    gemini_api_key: Optional[str] = None # Falls back to GOOGLE_API_KEY / GEMINI_API_KEY
    model_name: str = "gemini-2.5-flash"
    llm_temperature: float = 0.4
    llm_retries: int = 3
    llm_retry_delay_base_s: float = 2 # Exponential backoff base (2s, 4s, 8s)
    enable_llm_cache: bool = False # Reuse raw responses for identical prompts

    # --- Suggestions ---
    suggestion_debounce_s: float = 0.5 # Quiet period before a suggestion request is sent
    max_suggestions: int = 5

    # --- Reminders ---
    reminder_lead_s: int = 0 # Fire this many seconds before each 15-minute boundary
    local_tz: Optional[str] = None # None = system local time

    # --- Local API ---
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    model_config = SettingsConfigDict(
        env_prefix="DAYFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra='ignore'
    )
