"""
Gemini access for DayFlow.
Sends a prompt, retries transient failures with exponential backoff and
returns parsed JSON. Every failure mode ends up as a CollaboratorError.
"""

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Optional

from google import genai
from google.genai import types as genai_types

from DayFlow.config import Settings
from DayFlow.errors import CollaboratorError

log = logging.getLogger(__name__)


def extract_json(text: str) -> Any:
    """Parse JSON from plain text or a fenced ```json block."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        end = cleaned.find("\n")
        cleaned = cleaned[end + 1:] if end != -1 else ""
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
    cleaned = cleaned.strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise CollaboratorError(f"Model returned malformed JSON: {e}") from e


class LLMResponseCache:
    """Raw model responses stored on disk, keyed by prompt hash."""

    def __init__(self, settings: Settings):
        self.cache_enabled = settings.enable_llm_cache
        self.cache_dir: Path = settings.llm_cache_dir
        if self.cache_enabled:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            log.info(f"LLM cache enabled, using directory: {self.cache_dir}")

    @staticmethod
    def cache_key(model_name: str, prompt: str) -> str:
        return hashlib.md5(f"{model_name}\n{prompt}".encode()).hexdigest()

    def get(self, key: str) -> Optional[str]:
        if not self.cache_enabled:
            return None
        path = self.cache_dir / f"{key}.json"
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning(f"Failed to load cache for key {key}: {e}")
            try:
                path.unlink(missing_ok=True)
            except OSError as unlink_error:
                log.debug(f"Could not remove cache file {path}: {unlink_error}")
            return None
        log.info(f"Using cached LLM response for key {key}")
        return text

    def save(self, key: str, text: str) -> None:
        if not self.cache_enabled:
            return
        try:
            (self.cache_dir / f"{key}.json").write_text(text, encoding="utf-8")
        except OSError as e:
            log.warning(f"Failed to save to cache for key {key}: {e}")


class GeminiTextClient:
    def __init__(
        self,
        settings: Settings,
        client: Optional[genai.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.client = client
        self.cache = LLMResponseCache(settings)
        self._sleep = sleep

    def _get_client(self) -> genai.Client:
        """Lazy initialization of the Gemini client."""
        if self.client is not None:
            return self.client
        api_key = self.settings.gemini_api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise CollaboratorError("GEMINI_API_KEY (or GOOGLE_API_KEY / DAYFLOW_GEMINI_API_KEY) not set.")
        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:
            raise CollaboratorError(f"Failed to initialize Gemini client: {e}") from e
        log.info(f"Gemini client initialized with model target: {self.settings.model_name}")
        return self.client

    def generate_text(self, prompt: str) -> str:
        client = self._get_client()
        retries = max(1, self.settings.llm_retries)
        config = genai_types.GenerateContentConfig(
            response_mime_type="application/json",
            temperature=self.settings.llm_temperature,
        )

        for attempt in range(retries):
            try:
                log.debug(f"Attempt {attempt + 1}/{retries} to call Gemini.")
                response = client.models.generate_content(
                    model=self.settings.model_name,
                    contents=prompt,
                    config=config,
                )
            except Exception as e:
                log.warning(f"Gemini API error on attempt {attempt + 1}/{retries}: {type(e).__name__} - {e}")
                if attempt + 1 == retries:
                    raise CollaboratorError(f"Gemini call failed after {retries} attempt(s): {e}") from e
                self._sleep((2 ** attempt) * self.settings.llm_retry_delay_base_s)
                continue

            if response.prompt_feedback and response.prompt_feedback.block_reason:
                raise CollaboratorError(f"Prompt blocked by Gemini: {response.prompt_feedback.block_reason}")
            if not response.text:
                raise CollaboratorError("Empty response from Gemini.")
            log.debug(f"Gemini response text (first 100 chars): {response.text[:100]}")
            return response.text

        raise CollaboratorError("Failed to get response from Gemini after all retries.")

    def generate_json(self, prompt: str) -> Any:
        key = self.cache.cache_key(self.settings.model_name, prompt)
        raw = self.cache.get(key)
        if raw is None:
            raw = self.generate_text(prompt)
            data = extract_json(raw)
            self.cache.save(key, raw)
            return data
        return extract_json(raw)
