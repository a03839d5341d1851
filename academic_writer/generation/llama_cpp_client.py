from __future__ import annotations

"""
Local GGUF generation through llama-cpp-python.

Design intent:
- Offer an offline backend with the same contract as the HTTP clients.
- Load the model lazily once; keep chat_format compatibility with older bindings.
- Map every failure onto the shared generation error taxonomy.
"""

import logging
import os
import threading
import time
from typing import Any

from academic_writer.internal_core.contracts import ReferencingStyle
from academic_writer.prompt.builder import SYSTEM_INSTRUCTION, build_prompt

from .base import append_debug_log
from .errors import ConfigurationError, GenerationError, UnknownGenerationError

logger = logging.getLogger(__name__)


class LlamaCppGenerationClient:
    def __init__(
        self,
        *,
        model_path: str,
        n_ctx: int = 8192,
        n_gpu_layers: int = -1,
        n_threads: int | None = None,
        chat_format: str | None = "gemma",
        max_tokens: int = 2048,
        temperature: float = 0.7,
        top_p: float = 0.95,
        top_k: int = 40,
        debug_log_path: str | None = None,
    ):
        self._model_path = (model_path or "").strip()
        self._n_ctx = int(n_ctx)
        self._n_gpu_layers = int(n_gpu_layers)
        self._n_threads = n_threads
        self._chat_format = chat_format
        self._max_tokens = int(max_tokens)
        self._temperature = float(temperature)
        self._top_p = float(top_p)
        self._top_k = int(top_k)
        self._debug_log_path = debug_log_path
        self._llm: Any = None
        self._chat_format_applied: bool | None = None
        self._lock = threading.Lock()
        if not self._model_path:
            logger.error("llama_cpp_client_unconfigured reason=missing_model_path")

    @property
    def configured(self) -> bool:
        return bool(self._model_path)

    @property
    def chat_format_applied(self) -> bool | None:
        return self._chat_format_applied

    def _load(self) -> Any:
        if self._llm is not None:
            return self._llm
        if not self._model_path:
            raise ConfigurationError("Local model path is not configured. Set WRITER_LLAMA_CPP_MODEL.")
        if not os.path.exists(self._model_path):
            raise ConfigurationError(f"Local model file not found: {self._model_path}")
        try:
            from llama_cpp import Llama  # type: ignore
        except Exception as exc:
            raise ConfigurationError(f"llama_cpp import failed: {exc}") from exc

        llm_kwargs: dict[str, Any] = {
            "model_path": self._model_path,
            "n_ctx": self._n_ctx,
            "n_gpu_layers": self._n_gpu_layers,
            "verbose": False,
        }
        if self._chat_format:
            llm_kwargs["chat_format"] = self._chat_format
        if self._n_threads is not None:
            llm_kwargs["n_threads"] = int(self._n_threads)
        try:
            self._llm = Llama(**llm_kwargs)
            self._chat_format_applied = "chat_format" in llm_kwargs
        except TypeError as exc:
            if "chat_format" not in str(exc):
                raise
            llm_kwargs.pop("chat_format", None)
            self._llm = Llama(**llm_kwargs)
            self._chat_format_applied = False
        logger.info(
            "llama_cpp_model_loaded path=%s chat_format_applied=%s",
            self._model_path,
            self._chat_format_applied,
        )
        return self._llm

    def generate(self, draft: str, style: ReferencingStyle, *, instructions: str = "") -> str:
        prompt = build_prompt(draft, style, instructions=instructions)
        append_debug_log(
            self._debug_log_path,
            stage="llama_cpp_prompt",
            raw=prompt,
            metadata={"model_path": self._model_path, "style": style},
        )
        started = time.perf_counter()
        with self._lock:
            try:
                llm = self._load()
                resp = llm.create_chat_completion(
                    messages=[
                        {"role": "system", "content": SYSTEM_INSTRUCTION},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=self._temperature,
                    top_p=self._top_p,
                    top_k=self._top_k,
                    max_tokens=self._max_tokens,
                )
                text = str(resp["choices"][0]["message"]["content"] or "").strip()
            except GenerationError:
                raise
            except Exception as exc:
                raise UnknownGenerationError(
                    f"An unknown error occurred while generating feedback: {exc}"
                ) from exc

        if not text:
            raise UnknownGenerationError("Local model returned an empty response.")
        append_debug_log(
            self._debug_log_path,
            stage="llama_cpp_response",
            raw=text,
            metadata={"elapsed_ms": round((time.perf_counter() - started) * 1000.0, 2)},
        )
        return text
