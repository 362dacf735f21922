"""
Durable key-value store backends.

The session and storage layers persist everything as string values under
string keys, the same contract a browser's localStorage offers. Two backends
are provided: an in-memory one for tests and short-lived processes, and a
JSON-file one that survives restarts.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import get_settings
from .exceptions import QuotaExceededError, StorageUnavailableError

logger = logging.getLogger(__name__)


@runtime_checkable
class IKeyValueStore(Protocol):
    """Defines the operations the storage layer needs from a durable store."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> list[str]:
        ...

    def __len__(self) -> int:
        ...


@dataclass
class InMemoryKeyValueStore:
    """
    Dict-backed store.

    When max_bytes is set, a write that would push the total size of keys and
    values past it raises QuotaExceededError, which is how a full or disabled
    browser store behaves.
    """

    max_bytes: Optional[int] = None
    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            current = self._size() - self._entry_size(key, self.items.get(key))
            if current + self._entry_size(key, value) > self.max_bytes:
                raise QuotaExceededError(key, self.max_bytes)
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def _size(self) -> int:
        return sum(self._entry_size(k, v) for k, v in self.items.items())

    @staticmethod
    def _entry_size(key: str, value: Optional[str]) -> int:
        if value is None:
            return 0
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class FileKeyValueStore:
    """
    Store persisted as a single JSON object on disk.

    The file is loaded on first access and rewritten atomically after every
    mutation. A missing file is an empty store; an unreadable or malformed one
    is logged and treated as empty so the application keeps working.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._items: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        previous = items.get(key)
        items[key] = value
        try:
            self._flush(items)
        except StorageUnavailableError:
            if previous is None:
                items.pop(key, None)
            else:
                items[key] = previous
            raise

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        previous = items.pop(key)
        try:
            self._flush(items)
        except StorageUnavailableError:
            items[key] = previous
            raise

    def keys(self) -> list[str]:
        return list(self._load())

    def __len__(self) -> int:
        return len(self._load())

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        self._items = {}
        if not self._path.exists():
            return self._items

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self._path}: {e}")
            return self._items

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring store file {self._path}: not a JSON object")
            return self._items

        self._items = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        return self._items

    def _flush(self, items: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageUnavailableError(
                f"Could not write {self._path}: {e}",
                details={"path": str(self._path)},
            ) from e


# Module-level store instance
_store_instance: Optional[IKeyValueStore] = None


def get_kv_store() -> IKeyValueStore:
    """
    Get the process-wide durable store.

    Uses LOCAL_STORE_PATH when configured, otherwise an in-memory store.
    """
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        if settings.local_store_path:
            _store_instance = FileKeyValueStore(settings.local_store_path)
        else:
            _store_instance = InMemoryKeyValueStore()
    return _store_instance


def reset_kv_store() -> None:
    """Reset the store singleton (for testing)."""
    global _store_instance
    _store_instance = None
