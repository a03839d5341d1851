import sys
from types import SimpleNamespace

import pytest

from academic_writer.generation import ConfigurationError, LlamaCppGenerationClient, UnknownGenerationError
from academic_writer.prompt.builder import IEEE_RULES, SYSTEM_INSTRUCTION


def test_llama_cpp_client_uses_chat_format_when_supported(monkeypatch, tmp_path) -> None:
    created: list[dict] = []

    class FakeLlama:
        def __init__(self, **kwargs) -> None:
            created.append(kwargs)
            assert kwargs["chat_format"] == "gemma"

        def create_chat_completion(self, **kwargs):
            messages = kwargs["messages"]
            assert messages[0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
            assert IEEE_RULES in messages[1]["content"]
            return {"choices": [{"message": {"content": "### Analysis of Your Draft\n[1] ok"}}]}

    monkeypatch.setitem(sys.modules, "llama_cpp", SimpleNamespace(Llama=FakeLlama))
    model_path = tmp_path / "mock.gguf"
    model_path.write_text("x", encoding="utf-8")

    client = LlamaCppGenerationClient(model_path=str(model_path), chat_format="gemma")
    assert client.generate("Draft.", "IEEE") == "### Analysis of Your Draft\n[1] ok"
    assert client.generate("Second draft.", "IEEE").startswith("### Analysis")
    assert client.chat_format_applied is True
    assert len(created) == 1


def test_llama_cpp_client_falls_back_when_constructor_chat_format_is_unsupported(monkeypatch, tmp_path) -> None:
    class FakeLlama:
        def __init__(self, **kwargs) -> None:
            if "chat_format" in kwargs:
                raise TypeError("Llama.__init__() got an unexpected keyword argument 'chat_format'")

        def create_chat_completion(self, **kwargs):
            return {"choices": [{"message": {"content": "Feedback"}}]}

    monkeypatch.setitem(sys.modules, "llama_cpp", SimpleNamespace(Llama=FakeLlama))
    model_path = tmp_path / "mock.gguf"
    model_path.write_text("x", encoding="utf-8")

    client = LlamaCppGenerationClient(model_path=str(model_path), chat_format="gemma")
    assert client.generate("Draft.", "Harvard") == "Feedback"
    assert client.chat_format_applied is False


def test_llama_cpp_client_missing_model_is_configuration_error(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        LlamaCppGenerationClient(model_path="").generate("Draft.", "Harvard")
    with pytest.raises(ConfigurationError) as exc_info:
        LlamaCppGenerationClient(model_path=str(tmp_path / "absent.gguf")).generate("Draft.", "Harvard")
    assert "not found" in exc_info.value.message


def test_llama_cpp_client_inference_failure_is_unknown_error(monkeypatch, tmp_path) -> None:
    class FakeLlama:
        def __init__(self, **kwargs) -> None:
            _ = kwargs

        def create_chat_completion(self, **kwargs):
            raise RuntimeError("context window exceeded")

    monkeypatch.setitem(sys.modules, "llama_cpp", SimpleNamespace(Llama=FakeLlama))
    model_path = tmp_path / "mock.gguf"
    model_path.write_text("x", encoding="utf-8")

    with pytest.raises(UnknownGenerationError) as exc_info:
        LlamaCppGenerationClient(model_path=str(model_path)).generate("Draft.", "Harvard")
    assert "context window exceeded" in exc_info.value.message
