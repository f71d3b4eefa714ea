import pytest

from DayFlow.config import Settings
from DayFlow.database import KeyValueStore
from DayFlow.tracker import DayTracker

DAY = "2024-06-05"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        db_path=tmp_path / "dayflow.db",
        export_dir=tmp_path / "exports",
        llm_cache_dir=tmp_path / "cache",
        gemini_api_key="test-key",
        llm_retry_delay_base_s=0,
    )


@pytest.fixture
def kv(settings):
    store = KeyValueStore(settings.db_path)
    yield store
    store.close()


@pytest.fixture
def tracker(settings, kv):
    return DayTracker(settings, kv=kv)
