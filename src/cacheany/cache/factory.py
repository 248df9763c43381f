# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Build the configured cache backend from application settings.

:func:`get_cache` is the primary entry point for applications: it lazily
creates a module-level cache from :class:`~cacheany.core.config.Settings`
on first use and returns the same instance afterwards.
"""

from __future__ import annotations

import asyncio
import logging

from cacheany.cache.base import Cache, ttl_seconds
from cacheany.cache.memory import MemoryCache
from cacheany.core.config import Settings, get_settings
from cacheany.core.exceptions import ConfigurationError
from cacheany.core.logging import redact_sensitive

logger = logging.getLogger("cacheany.cache.factory")

# Module-level singleton
_cache: Cache | None = None
_cache_lock: asyncio.Lock | None = None


async def create_cache(settings: Settings | None = None) -> Cache:
    """Instantiate the cache backend named by ``settings.cache_backend``.

    Args:
        settings: Settings to use; read from the environment when ``None``.

    Raises:
        ConfigurationError: Unknown backend name or incomplete settings.
        BackendError: The backing store could not be reached.
    """
    settings = settings or get_settings()
    _check_expiry_settings(settings)
    backend_type = settings.cache_backend

    if backend_type == "memory":
        memory = MemoryCache(
            sweep_interval=settings.sweep_interval,
            default_ttl=settings.default_ttl,
        )
        await memory.start()
        logger.info("Using in-memory cache backend")
        return memory

    if backend_type == "redis":
        from cacheany.cache.redis import RedisCache

        logger.info("Using Redis cache backend at %s", redact_sensitive(settings.redis_url))
        return RedisCache.from_url(
            settings.redis_url,
            prefix=settings.redis_prefix,
            default_ttl=settings.default_ttl,
        )

    if backend_type == "sql":
        from cacheany.cache.sql import SQLCache
        from cacheany.storage.database import open_database

        db = await open_database(
            backend=settings.db_backend,
            db_path=settings.db_path,
            postgres_url=settings.postgres_url,
            postgres_pool_min=settings.postgres_pool_min,
            postgres_pool_max=settings.postgres_pool_max,
        )
        try:
            sql = SQLCache(
                db,
                table=settings.sql_table,
                key_field=settings.sql_key_field,
                value_field=settings.sql_value_field,
                default_ttl=settings.default_ttl,
            )
            await sql.ensure_schema()
        except BaseException:
            await db.close()
            raise
        logger.info("Using SQL cache backend (%s, table=%s)", db.backend_name, sql.table)
        return sql

    msg = f"Unknown cache backend: {backend_type!r}. Expected 'memory', 'redis' or 'sql'."
    raise ConfigurationError(msg)


def _check_expiry_settings(settings: Settings) -> None:
    try:
        ttl_seconds(settings.default_ttl)
    except ValueError as exc:
        msg = f"Invalid default_ttl setting: {exc}"
        raise ConfigurationError(msg) from exc
    if settings.sweep_interval is not None and settings.sweep_interval <= 0:
        msg = f"Invalid sweep_interval setting: must be positive, got {settings.sweep_interval!r}"
        raise ConfigurationError(msg)


async def get_cache() -> Cache:
    """Return the module-level :class:`Cache` singleton.

    Creates a new instance on first call using application settings.
    Concurrent first calls share a single instance.
    """
    global _cache, _cache_lock
    if _cache is not None:
        return _cache
    if _cache_lock is None:
        _cache_lock = asyncio.Lock()
    async with _cache_lock:
        if _cache is None:
            _cache = await create_cache()
    return _cache


def reset_cache() -> None:
    """Reset the singleton (useful for testing)."""
    global _cache, _cache_lock
    _cache = None
    _cache_lock = None
