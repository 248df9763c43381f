# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory cache backend with TTL expiry.

This is the default backend and requires no external services.  It keeps
a plain ``dict`` of byte payloads with per-entry expiry timestamps guarded
by a single :class:`asyncio.Lock`.  Expired entries are dropped lazily on
access; an optional background task can sweep them periodically.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from cacheany.cache.base import TTL, Cache, Key, key_bytes

logger = logging.getLogger("cacheany.cache.memory")


class _Entry:
    """A cache entry with an optional expiry timestamp."""

    __slots__ = ("expires_at", "value")

    def __init__(self, value: bytes, expires_at: float | None) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (time.monotonic() if now is None else now) >= self.expires_at


class MemoryCache(Cache):
    """In-process cache with TTL support.

    Args:
        sweep_interval: Seconds between background purges of expired
            entries.  ``None`` (the default) relies on lazy expiry only.
        default_ttl: TTL applied when :meth:`set` is called without one.
    """

    def __init__(
        self,
        sweep_interval: float | None = None,
        default_ttl: TTL = None,
    ) -> None:
        super().__init__(default_ttl=default_ttl)
        if sweep_interval is not None and sweep_interval <= 0:
            msg = f"sweep_interval must be positive, got {sweep_interval!r}"
            raise ValueError(msg)
        self._store: dict[bytes, _Entry] = {}
        self._lock = asyncio.Lock()
        self._sweep_interval = sweep_interval
        self._sweep_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Cache interface
    # ------------------------------------------------------------------

    async def get_raw(self, key: Key) -> bytes | None:
        k = key_bytes(key)
        async with self._lock:
            entry = self._live_entry(k)
            return entry.value if entry is not None else None

    async def set_raw(self, key: Key, data: bytes, ttl: float | None = None) -> None:
        expires_at = (time.monotonic() + ttl) if ttl is not None else None
        entry = _Entry(value=bytes(data), expires_at=expires_at)
        k = key_bytes(key)
        async with self._lock:
            self._store[k] = entry

    async def delete(self, key: Key) -> bool:
        k = key_bytes(key)
        async with self._lock:
            entry = self._store.pop(k, None)
        return entry is not None and not entry.is_expired()

    async def exists(self, key: Key) -> bool:
        k = key_bytes(key)
        async with self._lock:
            return self._live_entry(k) is not None

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._store)
            self._store.clear()
        return count

    async def size(self) -> int:
        async with self._lock:
            self._prune_expired()
            return len(self._store)

    async def close(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        async with self._lock:
            self._store.clear()

    # ------------------------------------------------------------------
    # Background expiry
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background sweeper if a ``sweep_interval`` was given."""
        if self._sweep_interval is None or self._sweep_task is not None:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(
            self._sweep_loop(self._sweep_interval)
        )
        logger.debug("Started expiry sweeper (interval=%ss)", self._sweep_interval)

    async def purge_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            The number of entries removed.
        """
        async with self._lock:
            return self._prune_expired()

    async def __aenter__(self) -> MemoryCache:
        await self.start()
        return self

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _live_entry(self, key: bytes) -> _Entry | None:
        """Return the entry for *key*, evicting it if it has expired."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._store[key]
            return None
        return entry

    def _prune_expired(self) -> int:
        now = time.monotonic()
        expired_keys = [k for k, v in self._store.items() if v.is_expired(now)]
        for k in expired_keys:
            del self._store[k]
        return len(expired_keys)

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            removed = await self.purge_expired()
            if removed:
                logger.debug("Swept %d expired entries", removed)
