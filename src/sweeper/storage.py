"""
Key-value stores for persisted games and settings.

Values are plain JSON-compatible dictionaries. No transactional
guarantees: the last `set` for a key wins.
"""
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union


logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


# ============================================================================
# Store Interface
# ============================================================================

class KeyValueStore(ABC):
    """Abstract key-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Store a value under key, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is a no-op."""


# ============================================================================
# Implementations
# ============================================================================

class MemoryStore(KeyValueStore):
    """Dictionary-backed store."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value, or None."""
        return self._data.get(key)

    def set(self, key: str, value: Dict[str, Any]) -> None:
        """Store a value under key."""
        self._data[key] = value

    def remove(self, key: str) -> None:
        """Delete key if present."""
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        """Check if key holds a value."""
        return key in self._data


class JsonFileStore(KeyValueStore):
    """
    Store that keeps each key in its own JSON file.

    Files live at `<directory>/<key>.json`; the directory is created on
    first write.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        """
        Initialize the store.

        Args:
            directory: Folder holding the JSON files.
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                value = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None
        if not isinstance(value, dict):
            logger.warning("Ignoring non-object value in %s", path)
            return None
        return value

    def set(self, key: str, value: Dict[str, Any]) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(value, f)

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
