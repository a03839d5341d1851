from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import httpx

from academic_writer.internal_core.contracts import ReferencingStyle

from .errors import TransportError


class TextGenerator(Protocol):
    def generate(self, draft: str, style: ReferencingStyle, *, instructions: str = "") -> str: ...


def resolve_debug_log_path(raw: str | None = None) -> str | None:
    value = (raw if raw is not None else os.getenv("WRITER_GENERATION_DEBUG_LOG", "")).strip()
    if not value:
        return None
    if value.lower() in {"1", "true", "on", "yes"}:
        return "/tmp/academic_writer_generation.log"
    return value


def append_debug_log(path: str | None, *, stage: str, raw: str, metadata: dict[str, Any] | None = None) -> None:
    if not path:
        return
    try:
        target = Path(path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat()
        meta = json.dumps(metadata or {}, ensure_ascii=True)
        payload = (
            f"[{stamp}] stage={stage} meta={meta}\n"
            "-----BEGIN GENERATION RAW-----\n"
            f"{raw}\n"
            "-----END GENERATION RAW-----\n"
        )
        with target.open("a", encoding="utf-8") as f:
            f.write(payload)
    except Exception:
        # Debug logging must never break generation.
        return


def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    http_client: Any = None,
) -> Any:
    """Send exactly one POST; transport failures become ``TransportError``."""
    try:
        if http_client is not None:
            return http_client.post(url, json=payload, headers=headers)
        with httpx.Client(timeout=timeout) as client:
            return client.post(url, json=payload, headers=headers)
    except httpx.RequestError as exc:
        detail = str(exc) or exc.__class__.__name__
        raise TransportError(f"Could not reach the text-generation service: {detail}") from exc


def error_detail(response: Any) -> str:
    """Best-effort human-readable detail from a failed HTTP response."""
    try:
        body = response.json()
    except Exception:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = str(error.get("message", "") or "").strip()
            if message:
                return message
        elif isinstance(error, str) and error.strip():
            return error.strip()
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
    text = str(getattr(response, "text", "") or "").strip()
    if text:
        return text[:300]
    return str(getattr(response, "reason_phrase", "") or "no response body")
