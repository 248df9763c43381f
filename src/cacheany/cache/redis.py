# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis cache backend using the ``redis`` async client.

Payloads are stored as raw bytes under ``<prefix>:<key>``.  Expiry is
delegated to Redis itself (``SET ... PX``), so no sweeping is needed.
"""

from __future__ import annotations

import contextlib
import logging
import re
from collections.abc import Iterator

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from cacheany.cache.base import TTL, Cache, Key, key_bytes
from cacheany.core.exceptions import BackendError, ConfigurationError

logger = logging.getLogger("cacheany.cache.redis")

_DEFAULT_PREFIX = "cacheany"
_DELETE_BATCH = 500
_GLOB_SPECIAL = re.compile(rb"([*?\[\]\\])")


@contextlib.contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Re-raise client failures as :class:`BackendError`."""
    try:
        yield
    except RedisError as exc:
        msg = f"Redis {operation} failed: {exc}"
        raise BackendError(msg) from exc


class RedisCache(Cache):
    """Redis-backed cache using the ``redis-py`` async client.

    Args:
        client: A ``redis.asyncio.Redis`` instance.  It must be created with
            ``decode_responses=False`` so payloads round-trip as bytes.
        prefix: Namespace prepended to every key as ``<prefix>:``.
        default_ttl: TTL applied when :meth:`set` is called without one.

    Raises:
        ConfigurationError: If *prefix* contains the ``:`` separator.
    """

    def __init__(
        self,
        client: aioredis.Redis,
        prefix: str = _DEFAULT_PREFIX,
        default_ttl: TTL = None,
    ) -> None:
        super().__init__(default_ttl=default_ttl)
        if ":" in prefix:
            msg = f"Redis key prefix may not contain ':': {prefix!r}"
            raise ConfigurationError(msg)
        self._client = client
        self._prefix = prefix.encode("utf-8") + b":"

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        prefix: str = _DEFAULT_PREFIX,
        default_ttl: TTL = None,
    ) -> RedisCache:
        """Create a cache from a connection URL (``redis://host:6379/0``)."""
        client = aioredis.from_url(redis_url, decode_responses=False)
        return cls(client, prefix=prefix, default_ttl=default_ttl)

    # ------------------------------------------------------------------
    # Cache interface
    # ------------------------------------------------------------------

    async def get_raw(self, key: Key) -> bytes | None:
        with _translate_errors("GET"):
            result = await self._client.get(self._prefixed(key))
        return bytes(result) if result is not None else None

    async def set_raw(self, key: Key, data: bytes, ttl: float | None = None) -> None:
        with _translate_errors("SET"):
            if ttl is not None:
                px = max(1, int(ttl * 1000))
                await self._client.set(self._prefixed(key), data, px=px)
            else:
                await self._client.set(self._prefixed(key), data)

    async def delete(self, key: Key) -> bool:
        with _translate_errors("DEL"):
            result = await self._client.delete(self._prefixed(key))
        return bool(result)

    async def exists(self, key: Key) -> bool:
        with _translate_errors("EXISTS"):
            result = await self._client.exists(self._prefixed(key))
        return bool(result)

    async def clear(self) -> int:
        """Delete all keys under this cache's prefix.

        Uses SCAN to avoid blocking Redis with a KEYS command.
        """
        count = 0
        batch: list[bytes] = []
        with _translate_errors("SCAN/DEL"):
            async for key in self._client.scan_iter(match=self._match_pattern()):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH:
                    count += await self._client.delete(*batch)
                    batch.clear()
            if batch:
                count += await self._client.delete(*batch)
        logger.info("Cleared %d Redis keys under prefix %r", count, self._prefix)
        return count

    async def size(self) -> int:
        """Count all keys under this cache's prefix."""
        count = 0
        with _translate_errors("SCAN"):
            async for _key in self._client.scan_iter(match=self._match_pattern()):
                count += 1
        return count

    async def close(self) -> None:
        with _translate_errors("close"):
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _prefixed(self, key: Key) -> bytes:
        return self._prefix + key_bytes(key)

    def _match_pattern(self) -> bytes:
        return _GLOB_SPECIAL.sub(rb"\\\1", self._prefix) + b"*"
