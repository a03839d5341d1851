from __future__ import annotations

import os
import tempfile
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Protocol


class Storage(Protocol):
    """String key-value storage with whole-value writes."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


def _safe_unlink(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except Exception:
        pass


def _sanitize_key(key: str) -> str:
    safe = "".join(ch if (ch.isalnum() or ch in {"_", "-", "."}) else "_" for ch in str(key or ""))
    safe = safe.strip("._")
    if not safe:
        raise ValueError(f"Invalid storage key: {key!r}")
    return safe[:128]


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = RLock()
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class JsonFileStorage:
    """One file per key under ``root_dir``; every write replaces the whole file."""

    def __init__(self, root_dir: Path):
        self._root_dir = Path(root_dir).expanduser().resolve()
        self._lock = RLock()

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def path_for(self, key: str) -> Path:
        return self._root_dir / f"{_sanitize_key(key)}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        with self._lock:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        with self._lock:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=str(self._root_dir))
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(str(value))
                os.replace(tmp_path, path)
            except Exception:
                _safe_unlink(tmp_path)
                raise

    def remove_item(self, key: str) -> None:
        with self._lock:
            _safe_unlink(self.path_for(key))
