# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract cache interface with a typed get/set surface and TTL support.

Backends implement the byte-level operations (``get_raw``, ``set_raw``,
``delete``, ``exists``, ``clear``, ``size``, ``close``).  The typed
:meth:`Cache.get` / :meth:`Cache.set` pair is implemented once here on top
of :mod:`cacheany.cacheable`, so backends never see application types.
"""

from __future__ import annotations

import abc
import logging
from datetime import timedelta
from types import TracebackType
from typing import Any, Self, TypeVar

from cacheany.cacheable import decode, encode

logger = logging.getLogger("cacheany.cache")

T = TypeVar("T")

Key = str | bytes
TTL = int | float | timedelta | None


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
        }


def ttl_seconds(ttl: TTL) -> float | None:
    """Normalise a TTL to seconds.

    Raises:
        ValueError: If *ttl* is zero or negative.
    """
    if ttl is None:
        return None
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
    if seconds <= 0:
        msg = f"TTL must be positive, got {seconds!r} seconds"
        raise ValueError(msg)
    return seconds


def key_bytes(key: Key) -> bytes:
    """Return *key* as bytes; ``str`` keys are UTF-8 encoded."""
    return key.encode("utf-8") if isinstance(key, str) else bytes(key)


class Cache(abc.ABC):
    """Abstract base class for cache backends.

    All operations are coroutines so that network- and disk-backed stores
    can be used interchangeably with the in-memory one.  A missing or
    expired key is never an error: reads return ``None``.

    Args:
        default_ttl: TTL applied by :meth:`set` when none is given.

    Raises (from any operation):
        BackendError: The underlying store failed or could not be reached.
    """

    def __init__(self, default_ttl: TTL = None) -> None:
        self._default_ttl = ttl_seconds(default_ttl)
        self._stats = CacheStats()

    # ------------------------------------------------------------------
    # Typed surface
    # ------------------------------------------------------------------

    async def get(self, key: Key, type_: type[T]) -> T | None:
        """Retrieve and decode the value stored under *key*.

        Args:
            key: Cache key.
            type_: The type to decode the stored bytes into.

        Returns:
            The decoded value, or ``None`` if the key does not exist or
            has expired.

        Raises:
            DecodeError: The stored bytes are not a valid *type_* encoding.
        """
        data = await self.get_raw(key)
        if data is None:
            self._stats.misses += 1
            logger.debug("Cache MISS for key %r", key)
            return None
        self._stats.hits += 1
        logger.debug("Cache HIT for key %r", key)
        return decode(data, type_)

    async def set(self, key: Key, value: Any, ttl: TTL = None) -> None:
        """Encode *value* and store it under *key*, replacing any entry.

        Args:
            key: Cache key.
            value: Any value supported by :func:`cacheany.cacheable.encode`.
            ttl: Time-to-live in seconds or as a ``timedelta``.  ``None``
                falls back to the cache's ``default_ttl`` (no expiry if
                that is unset too).
        """
        data = encode(value)
        seconds = ttl_seconds(ttl) if ttl is not None else self._default_ttl
        await self.set_raw(key, data, ttl=seconds)

    @property
    def stats(self) -> CacheStats:
        """Return the hit/miss statistics object."""
        return self._stats

    # ------------------------------------------------------------------
    # Byte-level interface
    # ------------------------------------------------------------------

    @abc.abstractmethod
    async def get_raw(self, key: Key) -> bytes | None:
        """Return the stored payload, or ``None`` if absent or expired."""

    @abc.abstractmethod
    async def set_raw(self, key: Key, data: bytes, ttl: float | None = None) -> None:
        """Store *data* under *key*.

        Args:
            key: Cache key.
            data: Payload to store.
            ttl: Time-to-live in seconds.  ``None`` means no expiry.
        """

    @abc.abstractmethod
    async def delete(self, key: Key) -> bool:
        """Delete a key from the cache.

        Returns:
            ``True`` if a live entry existed and was deleted, ``False``
            otherwise.
        """

    @abc.abstractmethod
    async def exists(self, key: Key) -> bool:
        """Check whether a key exists (and has not expired)."""

    @abc.abstractmethod
    async def clear(self) -> int:
        """Remove every entry held by this cache.

        Returns:
            The number of entries removed.
        """

    @abc.abstractmethod
    async def size(self) -> int:
        """Return the number of live (non-expired) entries in the cache."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any resources held by the backend."""

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
