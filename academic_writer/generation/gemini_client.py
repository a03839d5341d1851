from __future__ import annotations

"""
Gemini client for draft review, built on the google-genai SDK.

Design intent:
- Build the prompt locally and send exactly one generate_content call.
- Detect a missing credential when the client is built, fail every call fast.
- Never retry; a failed attempt is surfaced to the caller immediately.
"""

import logging
import threading
import time
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from academic_writer.internal_core.contracts import ReferencingStyle
from academic_writer.prompt.builder import SYSTEM_INSTRUCTION, build_prompt

from .base import append_debug_log
from .errors import ConfigurationError, GenerationError, TransportError, UnknownGenerationError

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    "Gemini API key is not configured. Set WRITER_GEMINI_API_KEY (or GEMINI_API_KEY / API_KEY)."
)


class GeminiGenerationClient:
    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.7,
        top_p: float = 0.95,
        top_k: int = 40,
        timeout: float | None = None,
        client: Any = None,
        debug_log_path: str | None = None,
    ):
        self._api_key = (api_key or "").strip()
        self._model = model
        self._temperature = float(temperature)
        self._top_p = float(top_p)
        self._top_k = int(top_k)
        self._timeout = timeout
        self._client = client
        self._client_lock = threading.Lock()
        self._debug_log_path = debug_log_path
        if not self._api_key:
            logger.error("gemini_client_unconfigured reason=missing_api_key model=%s", model)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            temperature=self._temperature,
            top_p=self._top_p,
            top_k=self._top_k,
        )

    def _get_client(self) -> Any:
        with self._client_lock:
            if self._client is None:
                http_options = None
                if self._timeout is not None:
                    # HttpOptions.timeout is in milliseconds.
                    http_options = types.HttpOptions(timeout=int(self._timeout * 1000))
                self._client = genai.Client(api_key=self._api_key, http_options=http_options)
            return self._client

    def generate(self, draft: str, style: ReferencingStyle, *, instructions: str = "") -> str:
        if not self._api_key:
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)

        prompt = build_prompt(draft, style, instructions=instructions)
        append_debug_log(
            self._debug_log_path,
            stage="gemini_prompt",
            raw=prompt,
            metadata={"model": self._model, "style": style},
        )
        started = time.perf_counter()
        try:
            response = self._get_client().models.generate_content(
                model=self._model,
                contents=prompt,
                config=self.build_config(),
            )
            text = _response_text(response)
        except GenerationError:
            raise
        except genai_errors.APIError as exc:
            detail = str(getattr(exc, "message", "") or "").strip() or str(exc)
            raise TransportError(
                f"Text-generation service returned HTTP {exc.code}: {detail}",
                status_code=exc.code,
            ) from exc
        except httpx.RequestError as exc:
            detail = str(exc) or exc.__class__.__name__
            raise TransportError(f"Could not reach the text-generation service: {detail}") from exc
        except Exception as exc:
            raise UnknownGenerationError(
                f"An unknown error occurred while generating feedback: {exc}"
            ) from exc

        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        append_debug_log(
            self._debug_log_path,
            stage="gemini_response",
            raw=text,
            metadata={"model": self._model, "elapsed_ms": elapsed_ms},
        )
        logger.info("gemini_generation_done model=%s chars=%s elapsed_ms=%s", self._model, len(text), elapsed_ms)
        return text


def _response_text(response: Any) -> str:
    text = getattr(response, "text", None) or ""
    if text.strip():
        return text
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    if block_reason:
        reason = getattr(block_reason, "value", block_reason)
        raise UnknownGenerationError(f"The request was blocked by the text-generation service: {reason}")
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise UnknownGenerationError("Text-generation service returned no candidates.")
    finish_reason = getattr(candidates[0], "finish_reason", None)
    reason = getattr(finish_reason, "value", finish_reason)
    suffix = f" (finish reason: {reason})" if reason else ""
    raise UnknownGenerationError(f"Text-generation service returned an empty response{suffix}.")
