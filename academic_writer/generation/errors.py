from __future__ import annotations

from typing import Optional

from academic_writer.internal_core.contracts import GenerationErrorKind


class GenerationError(RuntimeError):
    """Base for failures surfaced by a generation client."""

    kind: GenerationErrorKind = "unknown"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GenerationError):
    """Raised when a credential or endpoint is missing; no request is attempted."""

    kind: GenerationErrorKind = "configuration"


class TransportError(GenerationError):
    """Raised when the request did not complete or returned a non-success status."""

    kind: GenerationErrorKind = "transport"

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnknownGenerationError(GenerationError):
    kind: GenerationErrorKind = "unknown"
