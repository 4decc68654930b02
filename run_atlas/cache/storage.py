"""Key/value storage ports for the persistent geocode cache.

Values are opaque text (JSON documents in practice). A storage never
interprets them; decoding and shape checks belong to the cache on top.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class CacheStorage(ABC):
    """Minimal get/set/remove port injected into :class:`GeoCache`."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or ``None`` when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing anything already there."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop ``key``; missing keys are ignored."""


class MemoryStorage(CacheStorage):
    """Process-local storage, mostly for tests and one-off runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class JsonFileStorage(CacheStorage):
    """All keys live in one JSON object on disk, rewritten atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._log = logging.getLogger(self.__class__.__name__)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as exc:
            self._log.warning(
                "Ignoring unreadable cache file %s: %s", self.path, exc
            )
            return {}
        if not isinstance(payload, dict):
            self._log.warning(
                "Ignoring cache file %s: expected a JSON object, got %s",
                self.path,
                type(payload).__name__,
            )
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write_all(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with temp_path.open("w", encoding="utf-8") as handle:
            json.dump(values, handle, ensure_ascii=True, indent=2, sort_keys=True)
        temp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            values = self._read_all()
            values[key] = value
            self._write_all(values)

    def remove(self, key: str) -> None:
        with self._lock:
            values = self._read_all()
            if values.pop(key, None) is not None:
                self._write_all(values)


__all__ = ["CacheStorage", "MemoryStorage", "JsonFileStorage"]
