# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for building caches from settings and the module-level singleton."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cacheany.cache.factory import create_cache, get_cache, reset_cache
from cacheany.cache.memory import MemoryCache
from cacheany.cache.redis import RedisCache
from cacheany.cache.sql import SQLCache
from cacheany.core.config import Settings
from cacheany.core.exceptions import ConfigurationError


class TestCreateCache:
    async def test_memory_is_default(self) -> None:
        cache = await create_cache(Settings())
        assert isinstance(cache, MemoryCache)
        await cache.close()

    async def test_memory_with_sweeper_and_ttl(self) -> None:
        cache = await create_cache(Settings(sweep_interval=30, default_ttl=5))
        assert isinstance(cache, MemoryCache)
        assert cache._sweep_task is not None
        await cache.set("k", "v")
        assert cache._store[b"k"].expires_at is not None
        await cache.close()

    async def test_redis(self) -> None:
        settings = Settings(
            cache_backend="redis",
            redis_url="redis://:secret@cache-host:6379/2",
            redis_prefix="svc",
        )
        with patch("cacheany.cache.redis.aioredis.from_url", return_value=MagicMock()) as from_url:
            cache = await create_cache(settings)
        assert isinstance(cache, RedisCache)
        from_url.assert_called_once_with("redis://:secret@cache-host:6379/2", decode_responses=False)

    async def test_sql_on_sqlite(self) -> None:
        settings = Settings(cache_backend="sql", db_path=":memory:", sql_table="kv")
        cache = await create_cache(settings)
        try:
            assert isinstance(cache, SQLCache)
            assert cache.table == "kv"
            await cache.set("greeting", "hello")
            assert await cache.get("greeting", str) == "hello"
        finally:
            await cache.close()

    async def test_sql_bad_table_closes_connection(self) -> None:
        settings = Settings(cache_backend="sql", db_path=":memory:", sql_table="bad name")
        db = MagicMock()
        db.close = AsyncMock()
        with (
            patch("cacheany.storage.database.open_database", new=AsyncMock(return_value=db)),
            pytest.raises(ConfigurationError),
        ):
            await create_cache(settings)
        db.close.assert_awaited_once()

    async def test_sql_postgres_without_url(self) -> None:
        settings = Settings(cache_backend="sql", db_backend="postgres")
        with pytest.raises(ConfigurationError):
            await create_cache(settings)

    async def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown cache backend"):
            await create_cache(Settings(cache_backend="memcached"))

    @pytest.mark.parametrize("backend", ["memory", "redis", "sql"])
    async def test_non_positive_default_ttl(self, backend: str) -> None:
        with pytest.raises(ConfigurationError, match="default_ttl"):
            await create_cache(Settings(cache_backend=backend, default_ttl=-5))

    async def test_zero_sweep_interval(self) -> None:
        with pytest.raises(ConfigurationError, match="sweep_interval"):
            await create_cache(Settings(sweep_interval=0))

    async def test_invalid_ttl_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEANY_DEFAULT_TTL", "0")
        with pytest.raises(ConfigurationError):
            await create_cache()


class TestSingleton:
    async def test_get_cache_reuses_instance(self) -> None:
        first = await get_cache()
        second = await get_cache()
        assert first is second
        assert isinstance(first, MemoryCache)

    async def test_reset_cache(self) -> None:
        first = await get_cache()
        reset_cache()
        second = await get_cache()
        assert first is not second

    async def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHEANY_CACHE_BACKEND", "sql")
        monkeypatch.setenv("CACHEANY_DB_PATH", ":memory:")
        cache = await get_cache()
        try:
            assert isinstance(cache, SQLCache)
        finally:
            await cache.close()

    async def test_concurrent_first_calls_share_instance(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CACHEANY_CACHE_BACKEND", "sql")
        monkeypatch.setenv("CACHEANY_DB_PATH", ":memory:")
        first, second = await asyncio.gather(get_cache(), get_cache())
        try:
            assert first is second
        finally:
            await first.close()

    async def test_concurrent_first_calls_create_once(self) -> None:
        with patch(
            "cacheany.cache.factory.create_cache",
            new=AsyncMock(return_value=MemoryCache()),
        ) as create:
            results = await asyncio.gather(*(get_cache() for _ in range(5)))
        create.assert_awaited_once()
        assert all(result is results[0] for result in results)
