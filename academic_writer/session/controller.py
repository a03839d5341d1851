from __future__ import annotations

"""
Single-owner session state for the writing assistant.

Design intent:
- Own style/draft/output plus the ephemeral loading and error flags.
- Run at most one generation at a time; overlapping calls are rejected.
- Persist style/draft/output/history on every mutation, never loading/error.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional

from academic_writer.export.base import DocumentExporter, ExportedDocument, export_document
from academic_writer.generation.base import TextGenerator
from academic_writer.generation.errors import GenerationError
from academic_writer.internal_core.contracts import (
    DEFAULT_STYLE,
    REFERENCING_STYLES,
    GenerationErrorKind,
    HistoryItem,
    PersistedState,
    ReferencingStyle,
    SessionView,
)

from .history import HistoryStore, utc_now
from .persistence import StatePersistence

logger = logging.getLogger(__name__)

EMPTY_DRAFT_MESSAGE = "Please paste your draft text before requesting feedback."

_FAILURE_PREFIX: dict[str, str] = {
    "validation": "",
    "configuration": "Configuration error: ",
    "transport": "An error occurred while communicating with the AI: ",
    "unknown": "",
}


class SessionBusyError(RuntimeError):
    """Raised when generate() is called while a generation is already in flight."""


@dataclass(frozen=True)
class GenerationOutcome:
    ok: bool
    text: str = ""
    error_kind: Optional[GenerationErrorKind] = None
    error: Optional[str] = None
    history_item: Optional[HistoryItem] = None


def describe_failure(exc: BaseException) -> tuple[GenerationErrorKind, str]:
    if isinstance(exc, GenerationError):
        kind = exc.kind
        detail = exc.message
    else:
        kind = "unknown"
        detail = str(exc).strip()
        detail = (
            f"An unknown error occurred while generating feedback: {detail}"
            if detail
            else "An unknown error occurred while generating feedback."
        )
    return kind, _FAILURE_PREFIX[kind] + detail


class SessionController:
    def __init__(
        self,
        generator: TextGenerator,
        persistence: StatePersistence,
        *,
        history_limit: int = 0,
        exporters: Optional[Mapping[str, DocumentExporter]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._generator = generator
        self._persistence = persistence
        self._exporters: dict[str, DocumentExporter] = dict(exporters or {})
        self._state_lock = threading.RLock()
        self._busy_lock = threading.Lock()
        self._style: ReferencingStyle = DEFAULT_STYLE
        self._draft = ""
        self._output = ""
        self._is_loading = False
        self._error: Optional[str] = None
        self.history = HistoryStore(
            limit=history_limit,
            on_change=lambda _items: self._persist(),
            clock=clock,
        )

    def load(self) -> None:
        state = self._persistence.load()
        with self._state_lock:
            self._style = state.style
            self._draft = state.draft
            self._output = state.output
            self._is_loading = False
            self._error = None
            self.history.load(state.history)
        logger.info("session_loaded history_items=%s", len(self.history))

    def snapshot(self) -> PersistedState:
        with self._state_lock:
            return PersistedState(
                style=self._style,
                draft=self._draft,
                output=self._output,
                history=self.history.items,
            )

    def _persist(self) -> None:
        try:
            self._persistence.save(self.snapshot())
        except Exception as exc:
            # In-memory state stays authoritative when the storage write fails.
            logger.warning("state_save_failed key=%s error=%s", self._persistence.key, exc)

    def view(self) -> SessionView:
        with self._state_lock:
            return SessionView(
                style=self._style,
                draft=self._draft,
                output=self._output,
                is_loading=self._is_loading,
                error=self._error,
            )

    @property
    def style(self) -> ReferencingStyle:
        return self._style

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def output(self) -> str:
        return self._output

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    def set_style(self, style: ReferencingStyle) -> None:
        if style not in REFERENCING_STYLES:
            raise ValueError(f"Unsupported referencing style: {style!r}")
        with self._state_lock:
            self._style = style
            self._persist()

    def set_draft(self, draft: str) -> None:
        with self._state_lock:
            self._draft = str(draft)
            self._persist()

    def generate(self, *, instructions: str = "") -> GenerationOutcome:
        if not self._busy_lock.acquire(blocking=False):
            raise SessionBusyError("A generation is already in progress.")
        try:
            return self._generate_locked(instructions)
        finally:
            self._busy_lock.release()

    def _generate_locked(self, instructions: str) -> GenerationOutcome:
        with self._state_lock:
            draft = self._draft
            style = self._style
            if not draft.strip():
                self._error = EMPTY_DRAFT_MESSAGE
                return GenerationOutcome(ok=False, error_kind="validation", error=EMPTY_DRAFT_MESSAGE)
            self._error = None
            self._output = ""
            self._is_loading = True
            self._persist()

        try:
            try:
                text = self._generator.generate(draft, style, instructions=instructions)
            except Exception as exc:
                kind, message = describe_failure(exc)
                logger.warning("generation_failed kind=%s style=%s error=%s", kind, style, message)
                with self._state_lock:
                    self._error = message
                return GenerationOutcome(ok=False, error_kind=kind, error=message)

            with self._state_lock:
                self._output = text
                self._is_loading = False
                item = self.history.record(draft=draft, output=text, style=style)
        finally:
            with self._state_lock:
                self._is_loading = False
        logger.info("generation_done style=%s chars=%s history_item=%s", style, len(text), item.id)
        return GenerationOutcome(ok=True, text=text, history_item=item)

    def restore(self, item_id: int) -> HistoryItem:
        """Copy a past item's draft, output and style back into the session."""
        item = self.history.get(item_id)
        with self._state_lock:
            self._draft = item.draft
            self._output = item.output
            self._style = item.style
            self._error = None
            self._persist()
        return item

    def remove_history(self, item_id: int, *, confirmed: bool) -> HistoryItem:
        # Lock order: state, then history.
        with self._state_lock:
            return self.history.remove(item_id, confirmed=confirmed)

    def clear_history(self, *, confirmed: bool) -> int:
        with self._state_lock:
            return self.history.clear(confirmed=confirmed)

    def export(self, name: str) -> Optional[ExportedDocument]:
        exporter = self._exporters.get(name)
        if exporter is None:
            raise KeyError(f"Unknown export format: {name}")
        return export_document(exporter, self._output)
