"""
Session boundary for the writing assistant.

Design intent:
- One state owner with an explicit mutation API.
- History and session fields share one persisted storage entry.
"""

from .controller import (
    EMPTY_DRAFT_MESSAGE,
    GenerationOutcome,
    SessionBusyError,
    SessionController,
    describe_failure,
)
from .history import ConfirmationRequiredError, HistoryStore, history_preview
from .persistence import DEFAULT_STORAGE_KEY, StatePersistence

__all__ = [
    "EMPTY_DRAFT_MESSAGE",
    "GenerationOutcome",
    "SessionBusyError",
    "SessionController",
    "describe_failure",
    "ConfirmationRequiredError",
    "HistoryStore",
    "history_preview",
    "DEFAULT_STORAGE_KEY",
    "StatePersistence",
]
