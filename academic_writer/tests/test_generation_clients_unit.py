import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from academic_writer.generation import (
    ConfigurationError,
    GeminiGenerationClient,
    RemoteGenerationClient,
    TransportError,
    UnknownGenerationError,
    build_generation_client,
)
from academic_writer.generation import gemini_client as gemini_module
from academic_writer.internal_core.config import load_config
from academic_writer.prompt.builder import HARVARD_RULES, SYSTEM_INSTRUCTION


def _gemini_ok(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)]),
                finish_reason=types.FinishReason.STOP,
            )
        ]
    )


class _FakeModels:
    def __init__(self, *, response=None, error: Exception | None = None):
        self.calls: list[dict] = []
        self._response = response
        self._error = error

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self._error is not None:
            raise self._error
        return self._response


def _fake_sdk(**kwargs) -> SimpleNamespace:
    return SimpleNamespace(models=_FakeModels(**kwargs))


def test_gemini_client_sends_one_request_with_built_prompt() -> None:
    sdk = _fake_sdk(response=_gemini_ok("### Analysis of Your Draft\nGood."))
    client = GeminiGenerationClient(api_key="test-key", client=sdk)
    text = client.generate("The cat was big.", "Harvard")

    assert text == "### Analysis of Your Draft\nGood."
    assert len(sdk.models.calls) == 1
    call = sdk.models.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert "The cat was big." in call["contents"]
    assert HARVARD_RULES in call["contents"]
    config = call["config"]
    assert config.system_instruction == SYSTEM_INSTRUCTION
    assert config.temperature == 0.7
    assert config.top_p == 0.95
    assert config.top_k == 40


def test_gemini_client_without_key_fails_before_any_request() -> None:
    sdk = _fake_sdk(error=AssertionError("no request expected"))
    client = GeminiGenerationClient(api_key="", client=sdk)
    assert client.configured is False
    with pytest.raises(ConfigurationError) as exc_info:
        client.generate("Draft.", "IEEE")
    assert exc_info.value.kind == "configuration"
    assert "API key" in exc_info.value.message
    assert sdk.models.calls == []


def test_gemini_client_builds_sdk_client_with_key_and_timeout(monkeypatch) -> None:
    created: list[dict] = []
    sdk = _fake_sdk(response=_gemini_ok("Feedback"))

    def fake_client(**kwargs):
        created.append(kwargs)
        return sdk

    monkeypatch.setattr(gemini_module.genai, "Client", fake_client)
    client = GeminiGenerationClient(api_key="k", timeout=30.0)
    assert client.generate("Draft.", "Harvard") == "Feedback"
    assert client.generate("Draft again.", "Harvard") == "Feedback"

    assert len(created) == 1
    assert created[0]["api_key"] == "k"
    assert created[0]["http_options"].timeout == 30000


def test_gemini_client_api_error_is_transport_error_with_status() -> None:
    error = genai_errors.ClientError(
        429, {"error": {"code": 429, "message": "rate limited", "status": "RESOURCE_EXHAUSTED"}}
    )
    client = GeminiGenerationClient(api_key="k", client=_fake_sdk(error=error))
    with pytest.raises(TransportError) as exc_info:
        client.generate("Draft.", "Harvard")
    assert exc_info.value.status_code == 429
    assert "429" in exc_info.value.message
    assert "rate limited" in exc_info.value.message


def test_gemini_client_network_failure_is_transport_error() -> None:
    client = GeminiGenerationClient(api_key="k", client=_fake_sdk(error=httpx.ConnectError("connection refused")))
    with pytest.raises(TransportError) as exc_info:
        client.generate("Draft.", "Harvard")
    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.message


def test_gemini_client_blocked_prompt_is_unknown_error() -> None:
    blocked = SimpleNamespace(
        text=None,
        prompt_feedback=SimpleNamespace(block_reason="SAFETY"),
        candidates=None,
    )
    client = GeminiGenerationClient(api_key="k", client=_fake_sdk(response=blocked))
    with pytest.raises(UnknownGenerationError) as exc_info:
        client.generate("Draft.", "Harvard")
    assert "SAFETY" in exc_info.value.message


def test_gemini_client_unexpected_failure_is_unknown_error() -> None:
    client = GeminiGenerationClient(api_key="k", client=_fake_sdk(error=ValueError("bad payload")))
    with pytest.raises(UnknownGenerationError) as exc_info:
        client.generate("Draft.", "Harvard")
    assert "bad payload" in exc_info.value.message


def test_gemini_client_writes_debug_log(tmp_path) -> None:
    log_path = tmp_path / "generation.log"
    client = GeminiGenerationClient(
        api_key="k",
        client=_fake_sdk(response=_gemini_ok("Feedback text")),
        debug_log_path=str(log_path),
    )
    client.generate("Logged draft.", "IEEE")
    content = log_path.read_text(encoding="utf-8")
    assert "stage=gemini_prompt" in content
    assert "stage=gemini_response" in content
    assert "Logged draft." in content
    assert "Feedback text" in content


def test_remote_client_posts_draft_and_style() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"text": "### Analysis of Your Draft"})

    client = RemoteGenerationClient(
        endpoint="http://writer.test/api/generate",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    assert client.generate("Draft.", "IEEE") == "### Analysis of Your Draft"
    assert seen == [{"draft": "Draft.", "style": "IEEE"}]


def test_remote_client_surfaces_server_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json={"error": "upstream unavailable"})

    client = RemoteGenerationClient(
        endpoint="http://writer.test/api/generate",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    with pytest.raises(TransportError) as exc_info:
        client.generate("Draft.", "Harvard")
    assert exc_info.value.status_code == 502
    assert "upstream unavailable" in exc_info.value.message


def test_remote_client_missing_text_field_is_unknown_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": "x"})

    client = RemoteGenerationClient(
        endpoint="http://writer.test/api/generate",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    with pytest.raises(UnknownGenerationError):
        client.generate("Draft.", "Harvard")


def test_remote_client_without_endpoint_is_configuration_error() -> None:
    client = RemoteGenerationClient(endpoint="")
    with pytest.raises(ConfigurationError):
        client.generate("Draft.", "Harvard")


def test_build_generation_client_selects_backend(monkeypatch) -> None:
    monkeypatch.setenv("WRITER_GENERATION_BACKEND", "remote")
    monkeypatch.setenv("WRITER_REMOTE_ENDPOINT", "http://writer.test/api/generate")
    assert isinstance(build_generation_client(load_config()), RemoteGenerationClient)

    monkeypatch.setenv("WRITER_GENERATION_BACKEND", "gemini")
    monkeypatch.setenv("WRITER_GEMINI_API_KEY", "k")
    assert isinstance(build_generation_client(load_config()), GeminiGenerationClient)

    monkeypatch.setenv("WRITER_GENERATION_BACKEND", "carrier_pigeon")
    with pytest.raises(ValueError):
        build_generation_client(load_config())
