"""
Small TTL caches keyed by normalized company queries.

Entries carry their own timestamp and are checked at read time; an
expired entry reads as a miss and stays in place until overwritten.
"""
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def normalize_key(value: Optional[str]) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    return re.sub(r"\s+", " ", (value or "").strip()).lower()


def make_cache_key(company: str, role: str = "", university: str = "") -> str:
    return "|".join(normalize_key(part) for part in (company, role, university))


class CacheEntry(BaseModel):
    key: str
    timestamp: float
    payload: Any

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.timestamp < ttl_seconds


class MemoryCache:
    """Process-local cache, one per handler."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None or not entry.is_fresh(self.clock(), self.ttl_seconds):
            return None
        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = CacheEntry(key=key, timestamp=self.clock(), payload=payload)

    def clear(self) -> None:
        self._entries.clear()


class JsonFileCache:
    """
    Cache persisted as one JSON object: {key: {"timestamp": ..., "payload": ...}}.

    The file is re-read on every access so several workers sharing it see
    each other's writes. There is no locking; a concurrent write may be lost.
    """

    def __init__(
        self,
        path: Union[str, Path],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable cache file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._load().get(key)
        if not isinstance(raw, dict):
            return None
        try:
            entry = CacheEntry(key=key, **raw)
        except ValidationError:
            return None
        if not entry.is_fresh(self.clock(), self.ttl_seconds):
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        data = self._load()
        data[key] = {"timestamp": self.clock(), "payload": payload}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning(f"Failed to write cache file {self.path}: {e}")
