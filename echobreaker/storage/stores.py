"""Key-value stores backing the selector cache and the pending queue."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Minimal persistent key-value interface."""

    def get(self, key: str) -> Any | None:
        """Return the stored value or None when absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a value, overwriting any previous one."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    def clear(self) -> None:
        """Remove every key."""
        ...

    def keys(self) -> list[str]:
        """All stored keys."""
        ...


class MemoryStore:
    """Process-local store, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, Any] | None = None):
        """Initialize the store with optional initial contents."""
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        """Return the stored value or None when absent."""
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store a value."""
        self._data[key] = value

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self._data.pop(key, None)

    def clear(self) -> None:
        """Remove every key."""
        self._data.clear()

    def keys(self) -> list[str]:
        """All stored keys."""
        return list(self._data)


class JsonFileStore:
    """Store persisted as a single JSON object on disk.

    The file is read once and every write goes through to disk, so a value
    written during a collection pass is visible to the next read in the same
    pass without touching the file again.

    Attributes:
        path: Location of the JSON file

    """

    def __init__(self, path: str | Path):
        """Initialize the store, loading the file if it exists.

        Args:
            path: Location of the JSON file

        """
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(f'Ignoring unreadable store {self.path}: {e}')
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Any | None:
        """Return the stored value or None when absent."""
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store a value and write the file."""
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        """Remove a key if present and write the file."""
        if self._data.pop(key, None) is not None:
            self._save()

    def clear(self) -> None:
        """Remove every key and write the file."""
        self._data = {}
        self._save()

    def keys(self) -> list[str]:
        """All stored keys."""
        return list(self._data)
