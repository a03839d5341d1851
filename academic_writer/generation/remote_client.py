from __future__ import annotations

import logging
from typing import Any

from academic_writer.internal_core.contracts import ReferencingStyle

from .base import error_detail, post_json
from .errors import ConfigurationError, GenerationError, TransportError, UnknownGenerationError

logger = logging.getLogger(__name__)


class RemoteGenerationClient:
    """Posts ``{draft, style}`` to a generation endpoint that builds the prompt server-side."""

    def __init__(self, *, endpoint: str, timeout: float | None = None, http_client: Any = None):
        self._endpoint = (endpoint or "").strip()
        self._timeout = timeout
        self._http_client = http_client
        if not self._endpoint:
            logger.error("remote_client_unconfigured reason=missing_endpoint")

    @property
    def configured(self) -> bool:
        return bool(self._endpoint)

    def generate(self, draft: str, style: ReferencingStyle, *, instructions: str = "") -> str:
        if not self._endpoint:
            raise ConfigurationError(
                "Generation endpoint is not configured. Set WRITER_REMOTE_ENDPOINT."
            )
        payload: dict[str, Any] = {"draft": draft, "style": style}
        if instructions and instructions.strip():
            payload["instructions"] = instructions

        try:
            response = post_json(
                self._endpoint,
                payload,
                timeout=self._timeout,
                http_client=self._http_client,
            )
            if response.status_code < 200 or response.status_code >= 300:
                raise TransportError(
                    f"Generation endpoint returned HTTP {response.status_code}: {error_detail(response)}",
                    status_code=response.status_code,
                )
            body = response.json()
        except GenerationError:
            raise
        except Exception as exc:
            raise UnknownGenerationError(
                f"An unknown error occurred while generating feedback: {exc}"
            ) from exc

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise UnknownGenerationError("Generation endpoint response is missing the 'text' field.")
        return text
