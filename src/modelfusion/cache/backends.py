"""
Caches for model responses.

``generate_text`` looks up the raw provider response by call key before
calling the model and stores it afterwards. Keys are arbitrary JSON-like
values (see :mod:`modelfusion.cache.key`); values must be JSON serializable
for :class:`FileCache`.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from modelfusion.cache.key import canonical_key, hash_key
from modelfusion.telemetry.logger import get_logger

logger = get_logger("modelfusion.cache")


@runtime_checkable
class Cache(Protocol):
    """Stores call results by key."""

    async def lookup_value(self, key: Any) -> Any | None:
        """Get a cached value, or None on a miss."""
        ...

    async def store_value(self, key: Any, value: Any) -> None: ...


@dataclass
class CacheEntry:
    """A cached value.

    Attributes:
        value: Cached value
        created_at: Unix time the value was stored
        ttl: Seconds the value stays valid (None = forever)
        hits: Lookups served by this entry
    """

    value: Any
    created_at: float
    ttl: float | None = None
    hits: int = 0

    @classmethod
    def create(cls, value: Any, ttl: float | None) -> CacheEntry:
        return cls(value=value, created_at=time.time(), ttl=ttl)

    @property
    def is_expired(self) -> bool:
        return self.ttl is not None and time.time() > self.created_at + self.ttl


class MemoryCache:
    """In-process cache.

    When ``max_size`` is reached, expired entries are dropped first; if none
    expired, the entry with the fewest hits is evicted.

    Example:
        >>> cache = MemoryCache(default_ttl=3600)
        >>> text = await generate_text(model, "Write a haiku", options=FunctionOptions(cache=cache))
    """

    def __init__(self, max_size: int | None = None, default_ttl: float | None = None) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return len(self._entries)

    async def lookup_value(self, key: Any) -> Any | None:
        entry_key = canonical_key(key)
        async with self._lock:
            entry = self._entries.get(entry_key)
            if entry is None:
                return None
            if entry.is_expired:
                del self._entries[entry_key]
                return None
            entry.hits += 1
            return entry.value

    async def store_value(self, key: Any, value: Any, ttl: float | None = None) -> None:
        entry_key = canonical_key(key)
        async with self._lock:
            if entry_key not in self._entries:
                self._make_room()
            self._entries[entry_key] = CacheEntry.create(
                value, ttl if ttl is not None else self._default_ttl
            )

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def _make_room(self) -> None:
        if self._max_size is None or len(self._entries) < self._max_size:
            return

        for entry_key in [k for k, entry in self._entries.items() if entry.is_expired]:
            del self._entries[entry_key]
        if len(self._entries) >= self._max_size:
            least_used = min(self._entries, key=lambda k: self._entries[k].hits)
            del self._entries[least_used]


class FileCache:
    """Cache with one JSON file per entry.

    Files are named ``<sha256 of the canonical key>.json`` and hold the key,
    the value, the creation time and the ttl. Unreadable files count as
    misses.

    Example:
        >>> cache = FileCache(cache_dir=".cache")
        >>> text = await generate_text(model, "Write a story", options=FunctionOptions(cache=cache))
    """

    def __init__(self, cache_dir: str | Path = ".cache", default_ttl: float | None = None) -> None:
        self._dir = Path(cache_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._default_ttl = default_ttl
        self._lock = asyncio.Lock()

    @property
    def cache_dir(self) -> Path:
        return self._dir

    def _path_for(self, key: Any) -> Path:
        return self._dir / f"{hash_key(key)}.json"

    def _read(self, path: Path) -> CacheEntry | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable cache file", path=str(path), error=str(e))
            return None
        return CacheEntry(value=data.get("value"), created_at=data.get("created_at", 0), ttl=data.get("ttl"))

    async def lookup_value(self, key: Any) -> Any | None:
        path = self._path_for(key)
        async with self._lock:
            entry = self._read(path)
            if entry is None:
                return None
            if entry.is_expired:
                path.unlink(missing_ok=True)
                return None
            return entry.value

    async def store_value(self, key: Any, value: Any, ttl: float | None = None) -> None:
        path = self._path_for(key)
        entry = CacheEntry.create(value, ttl if ttl is not None else self._default_ttl)
        data = {
            "key": json.loads(canonical_key(key)),
            "value": entry.value,
            "created_at": entry.created_at,
            "ttl": entry.ttl,
        }
        async with self._lock:
            try:
                path.write_text(json.dumps(data), encoding="utf-8")
            except OSError as e:
                logger.warning("Failed to write cache file", path=str(path), error=str(e))

    async def clear(self) -> None:
        async with self._lock:
            for path in self._dir.glob("*.json"):
                path.unlink(missing_ok=True)
