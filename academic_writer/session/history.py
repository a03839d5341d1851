from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock
from typing import Callable, List, Optional, Sequence

from academic_writer.internal_core.contracts import HistoryItem, ReferencingStyle

PREVIEW_CHARS = 80


class ConfirmationRequiredError(ValueError):
    """Raised when a destructive history action arrives without user confirmation."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def history_preview(item: HistoryItem, limit: int = PREVIEW_CHARS) -> str:
    preview = item.draft[:limit] or "Untitled Draft"
    if len(item.draft) > limit:
        preview += "..."
    return preview


class HistoryStore:
    """
    Most-recent-first log of past generations.

    Every mutation hands the full sequence to ``on_change``, which rewrites the
    persisted copy; items are never edited after creation.
    """

    def __init__(
        self,
        *,
        limit: int = 0,
        on_change: Optional[Callable[[List[HistoryItem]], None]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._limit = max(0, int(limit))
        self._on_change = on_change
        self._clock = clock
        self._lock = RLock()
        self._items: List[HistoryItem] = []

    @property
    def items(self) -> List[HistoryItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, item_id: int) -> HistoryItem:
        with self._lock:
            for item in self._items:
                if item.id == item_id:
                    return item
        raise KeyError(f"Unknown history item: {item_id}")

    def load(self, items: Sequence[HistoryItem]) -> None:
        with self._lock:
            self._items = self._trim(list(items))

    def _trim(self, items: List[HistoryItem]) -> List[HistoryItem]:
        if self._limit and len(items) > self._limit:
            return items[: self._limit]
        return items

    def _next_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        if self._items:
            candidate = max(candidate, max(item.id for item in self._items) + 1)
        return candidate

    def _changed(self, items: List[HistoryItem]) -> None:
        # Called after _lock is released so listeners may take their own locks.
        if self._on_change is not None:
            self._on_change(items)

    def record(self, *, draft: str, output: str, style: ReferencingStyle) -> HistoryItem:
        with self._lock:
            now = self._clock()
            item = HistoryItem(
                id=self._next_id(now),
                draft=draft,
                output=output,
                style=style,
                timestamp=now.isoformat(),
            )
            self._items = self._trim([item] + self._items)
            items = list(self._items)
        self._changed(items)
        return item

    def append(self, item: HistoryItem) -> None:
        with self._lock:
            self._items = self._trim([item] + self._items)
            items = list(self._items)
        self._changed(items)

    def remove(self, item_id: int, *, confirmed: bool) -> HistoryItem:
        if not confirmed:
            raise ConfirmationRequiredError("Deleting a history item requires confirmation.")
        with self._lock:
            for index, item in enumerate(self._items):
                if item.id == item_id:
                    del self._items[index]
                    items = list(self._items)
                    break
            else:
                raise KeyError(f"Unknown history item: {item_id}")
        self._changed(items)
        return item

    def clear(self, *, confirmed: bool) -> int:
        if not confirmed:
            raise ConfirmationRequiredError("Clearing history requires confirmation.")
        with self._lock:
            removed = len(self._items)
            self._items = []
        self._changed([])
        return removed
