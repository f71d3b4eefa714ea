from unittest.mock import MagicMock

import pytest

from DayFlow.errors import CollaboratorError
from DayFlow.narrative.client import GeminiTextClient, extract_json


def _response(text, block_reason=None):
    response = MagicMock()
    response.text = text
    response.prompt_feedback = MagicMock(block_reason=block_reason) if block_reason else None
    return response


@pytest.fixture
def genai_client():
    return MagicMock()


def test_extract_json_plain_and_fenced():
    assert extract_json('{"a": 1}') == {"a": 1}
    assert extract_json('```json\n{"suggestions": ["x"]}\n```') == {"suggestions": ["x"]}


def test_extract_json_malformed_raises():
    with pytest.raises(CollaboratorError):
        extract_json("Sure! Here is your report")


def test_generate_json_parses_response(settings, genai_client):
    genai_client.models.generate_content.return_value = _response('{"summaryReport": "ok"}')
    client = GeminiTextClient(settings, client=genai_client)

    assert client.generate_json("prompt") == {"summaryReport": "ok"}
    kwargs = genai_client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == settings.model_name
    assert kwargs["contents"] == "prompt"


def test_transient_errors_are_retried_with_backoff(settings, genai_client):
    settings.llm_retry_delay_base_s = 2
    genai_client.models.generate_content.side_effect = [
        RuntimeError("503"),
        RuntimeError("503"),
        _response('{"ok": true}'),
    ]
    sleep = MagicMock()
    client = GeminiTextClient(settings, client=genai_client, sleep=sleep)

    assert client.generate_json("prompt") == {"ok": True}
    assert [c.args[0] for c in sleep.call_args_list] == [2, 4]


def test_exhausted_retries_raise_collaborator_error(settings, genai_client):
    genai_client.models.generate_content.side_effect = RuntimeError("network down")
    client = GeminiTextClient(settings, client=genai_client, sleep=MagicMock())

    with pytest.raises(CollaboratorError):
        client.generate_text("prompt")
    assert genai_client.models.generate_content.call_count == settings.llm_retries


def test_blocked_prompt_raises(settings, genai_client):
    genai_client.models.generate_content.return_value = _response("", block_reason="SAFETY")
    with pytest.raises(CollaboratorError, match="blocked"):
        GeminiTextClient(settings, client=genai_client).generate_text("prompt")


def test_empty_response_raises(settings, genai_client):
    genai_client.models.generate_content.return_value = _response("")
    with pytest.raises(CollaboratorError):
        GeminiTextClient(settings, client=genai_client).generate_text("prompt")


def test_missing_api_key_raises(settings, monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    settings.gemini_api_key = None
    with pytest.raises(CollaboratorError):
        GeminiTextClient(settings).generate_text("prompt")


def test_cache_reuses_identical_prompts(settings, genai_client):
    settings.enable_llm_cache = True
    genai_client.models.generate_content.return_value = _response('{"n": 1}')
    client = GeminiTextClient(settings, client=genai_client)

    assert client.generate_json("same prompt") == {"n": 1}
    assert client.generate_json("same prompt") == {"n": 1}
    assert genai_client.models.generate_content.call_count == 1
    assert len(list(settings.llm_cache_dir.glob("*.json"))) == 1


def test_damaged_cache_file_is_dropped(settings, genai_client):
    settings.enable_llm_cache = True
    client = GeminiTextClient(settings, client=genai_client)
    key = client.cache.cache_key(settings.model_name, "prompt")
    cache_file = settings.llm_cache_dir / f"{key}.json"
    cache_file.write_bytes(b"\xff\xfe\x00broken")
    genai_client.models.generate_content.return_value = _response('{"fresh": true}')

    assert client.cache.get(key) is None
    assert not cache_file.exists()
    assert client.generate_json("prompt") == {"fresh": True}
