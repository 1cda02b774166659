"""
Durable key/value document stores.

Provides the storage layer both caches sit on:
- JsonFileStore: one JSON object per file, loaded lazily, written atomically
- MemoryStore: in-process test double with the same contract
- Graceful degradation: missing or unparsable files behave as empty caches

Reads and writes are coroutines; file I/O runs in a worker thread so the
event loop keeps serving other fetches.
"""

import asyncio
import contextlib
import copy
import json
import os
import tempfile
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar

from follow_ranker.exceptions import CacheCorruptError
from follow_ranker.logging import get_logger

logger = get_logger("cache.store")

T = TypeVar("T")
R = TypeVar("R")

_MISSING = object()


@dataclass(frozen=True)
class CacheLookup(Generic[T]):
    """
    Explicit two-state lookup result.

    Usage:
        lookup = await store.get("relations")
        if lookup.is_hit:
            use(lookup.value)
    """

    is_hit: bool
    value: Optional[T] = None

    @classmethod
    def hit(cls, value: T) -> "CacheLookup[T]":
        return cls(is_hit=True, value=value)

    @classmethod
    def miss(cls) -> "CacheLookup[T]":
        return cls(is_hit=False)


class JsonStore:
    """
    Abstract JSON document store keyed by string.

    Values must be JSON-serializable. Subclasses implement the
    storage primitives; the get-or-compute flow is shared.
    """

    def __init__(self, name: str):
        self.name = name

    async def get(self, key: str) -> CacheLookup[Any]:
        raise NotImplementedError

    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def keys(self) -> list[str]:
        raise NotImplementedError

    async def clear(self) -> int:
        """Remove every entry; returns how many were removed."""
        raise NotImplementedError

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        decode: Optional[Callable[[Any], R]] = None,
    ) -> Any:
        """
        Return the stored value for `key`, computing and storing it on a miss.

        Args:
            key: Cache key
            compute: Coroutine factory producing the JSON value to store
            decode: Optional converter applied to the stored value. A
                CacheCorruptError from it turns a hit into a miss.

        Returns:
            The (decoded) value

        Notes:
            - Errors raised by `compute` propagate and nothing is stored
            - Concurrent misses for the same key may each compute; the last
              write wins
        """
        lookup = await self.get(key)
        if lookup.is_hit:
            if decode is None:
                logger.debug("cache_hit", store=self.name, key=key)
                return lookup.value
            try:
                decoded = decode(lookup.value)
            except CacheCorruptError as e:
                logger.warning("cache_corrupt", store=self.name, key=key, error=e.reason)
            else:
                logger.debug("cache_hit", store=self.name, key=key)
                return decoded

        logger.debug("cache_miss", store=self.name, key=key)
        value = await compute()
        await self.set(key, value)
        return decode(value) if decode is not None else value


class MemoryStore(JsonStore):
    """In-memory store. Values are deep-copied in and out like a real serializer would."""

    def __init__(self, name: str = "memory", initial: Optional[dict[str, Any]] = None):
        super().__init__(name)
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.write_count = 0

    async def get(self, key: str) -> CacheLookup[Any]:
        if key not in self._data:
            return CacheLookup.miss()
        return CacheLookup.hit(copy.deepcopy(self._data[key]))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self.write_count += 1

    async def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        return True

    async def keys(self) -> list[str]:
        return sorted(self._data)

    async def clear(self) -> int:
        removed = len(self._data)
        self._data.clear()
        return removed

    def snapshot(self) -> dict[str, Any]:
        """Copy of the raw contents, for assertions."""
        return copy.deepcopy(self._data)


class JsonFileStore(JsonStore):
    """
    JSON object persisted in a single file.

    Features:
    - Lazy load on first access
    - Atomic writes (temporary file in the same directory + os.replace)
    - Coalesced writes: concurrent `set` calls share one file rewrite
    - Cold start on missing or corrupt files

    Single-writer: two processes sharing the same path is unsupported and
    the last writer wins.
    """

    def __init__(self, path: Path | str, name: Optional[str] = None):
        self.path = Path(path)
        super().__init__(name or self.path.stem)
        self._data: dict[str, Any] = {}
        self._loaded = False
        # Mutation counter and the last counter value that reached disk
        self._version = 0
        self._persisted_version = 0
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    # =========================================================================
    # File I/O (runs in a worker thread)
    # =========================================================================

    def _read_file(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("cache_file_missing", store=self.name, path=str(self.path))
            return {}
        except OSError as e:
            logger.warning("cache_file_unreadable", store=self.name, path=str(self.path), error=str(e))
            return {}

        try:
            return _decode_document(raw, self.name)
        except CacheCorruptError as e:
            logger.warning("cache_corrupt", store=self.name, path=str(self.path), error=e.reason)
            return {}

    def _write_file(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise

    # =========================================================================
    # Store contract
    # =========================================================================

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            self._data = await asyncio.to_thread(self._read_file)
            self._loaded = True
            logger.debug("cache_loaded", store=self.name, entries=len(self._data))

    async def _persist(self) -> None:
        self._version += 1
        version = self._version
        async with self._write_lock:
            if self._persisted_version >= version:
                # A writer that ran while we waited already included our change
                return
            writing = self._version
            payload = json.dumps(self._data, indent=2, sort_keys=True)
            await asyncio.to_thread(self._write_file, payload)
            self._persisted_version = writing

    def _restore(self, key: str, previous: Any) -> None:
        if previous is _MISSING:
            self._data.pop(key, None)
        else:
            self._data[key] = previous

    async def get(self, key: str) -> CacheLookup[Any]:
        await self._ensure_loaded()
        if key not in self._data:
            return CacheLookup.miss()
        return CacheLookup.hit(copy.deepcopy(self._data[key]))

    async def set(self, key: str, value: Any) -> None:
        # Fail before mutating memory if the value cannot be persisted
        json.dumps(value)
        await self._ensure_loaded()
        previous = self._data.get(key, _MISSING)
        self._data[key] = copy.deepcopy(value)
        try:
            await self._persist()
        except BaseException:
            # Memory must not hold what never reached disk
            self._restore(key, previous)
            raise

    async def delete(self, key: str) -> bool:
        await self._ensure_loaded()
        if key not in self._data:
            return False
        previous = self._data.pop(key)
        try:
            await self._persist()
        except BaseException:
            self._restore(key, previous)
            raise
        return True

    async def keys(self) -> list[str]:
        await self._ensure_loaded()
        return sorted(self._data)

    async def clear(self) -> int:
        await self._ensure_loaded()
        previous = self._data
        removed = len(previous)
        self._data = {}
        try:
            await self._persist()
        except BaseException:
            self._data = previous
            raise
        return removed


def _decode_document(raw: str, source: str) -> dict[str, Any]:
    """Parse a store file; the top level must be a JSON object."""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CacheCorruptError(source, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CacheCorruptError(source, f"expected an object, got {type(data).__name__}")
    return data
