from __future__ import annotations

import logging

from academic_writer.internal_core.contracts import PersistedState
from academic_writer.internal_core.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "academic-writer-state"


class StatePersistence:
    """Reads and rewrites the single storage entry holding style, draft, output and history."""

    def __init__(self, storage: Storage, key: str = DEFAULT_STORAGE_KEY):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> PersistedState:
        try:
            raw = self._storage.get_item(self._key)
        except Exception as exc:
            logger.warning("state_load_failed key=%s reason=read_error error=%s", self._key, exc)
            return PersistedState()
        if raw is None or raw.strip() == "":
            return PersistedState()
        try:
            return PersistedState.model_validate_json(raw)
        except Exception as exc:
            # Corrupt or outdated data must not block startup.
            logger.warning("state_load_failed key=%s reason=parse_error error=%s", self._key, exc)
            return PersistedState()

    def save(self, state: PersistedState) -> None:
        self._storage.set_item(self._key, state.model_dump_json())
