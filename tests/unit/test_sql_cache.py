# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the SQL cache backend on a real in-memory SQLite database."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from cacheany.cache.base import Cache
from cacheany.cache.sql import SQLCache
from cacheany.core.exceptions import BackendError, ConfigurationError, DecodeError
from cacheany.storage.sqlite_backend import SQLiteBackend

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class Account(BaseModel):
    user_id: int
    username: str


@pytest.fixture
async def db():
    backend = await SQLiteBackend.connect(":memory:")
    yield backend
    await backend.close()


@pytest.fixture
async def cache(db: SQLiteBackend) -> SQLCache:
    sql_cache = SQLCache(db)
    await sql_cache.ensure_schema()
    return sql_cache


async def _expire(db: SQLiteBackend, key: str, table: str = "cache") -> None:
    await db.execute(
        f"UPDATE {table} SET expires_at = ? WHERE name = ?",  # noqa: S608
        (time.time() - 1, key),
    )
    await db.commit()


async def _row_count(db: SQLiteBackend, table: str = "cache") -> int:
    row = await db.fetch_one(f"SELECT COUNT(*) AS n FROM {table}")  # noqa: S608
    assert row is not None
    return int(row["n"])


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestSQLCacheConfig:
    def test_is_subclass(self) -> None:
        assert issubclass(SQLCache, Cache)

    def test_defaults(self, db: SQLiteBackend) -> None:
        sql_cache = SQLCache(db)
        assert sql_cache.table == "cache"
        assert sql_cache.db is db

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"table": "cache; DROP TABLE users"},
            {"key_field": "1name"},
            {"value_field": "val-ue"},
            {"expires_field": ""},
        ],
    )
    def test_rejects_bad_identifiers(self, db: SQLiteBackend, kwargs: dict[str, str]) -> None:
        with pytest.raises(ConfigurationError, match="Invalid SQL"):
            SQLCache(db, **kwargs)

    async def test_custom_table_and_columns(self, db: SQLiteBackend) -> None:
        sql_cache = SQLCache(db, table="my_cache", key_field="k", value_field="v")
        await sql_cache.ensure_schema()
        await sql_cache.set("user_id", 114514)
        row = await db.fetch_one("SELECT k, v FROM my_cache")
        assert row == {"k": "user_id", "v": "01bf52"}

    async def test_ensure_schema_is_idempotent(self, cache: SQLCache) -> None:
        await cache.set("a", 1)
        await cache.ensure_schema()
        assert await cache.get("a", int) == 1


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class TestSQLCacheOperations:
    async def test_round_trip_heterogeneous(self, cache: SQLCache) -> None:
        await cache.set("user_id", 114514)
        await cache.set("username", "jack")
        await cache.set("account", Account(user_id=1, username="jack"))

        assert await cache.get("user_id", int) == 114514
        assert await cache.get("username", str) == "jack"
        assert await cache.get("account", Account) == Account(user_id=1, username="jack")

    async def test_missing_returns_none(self, cache: SQLCache) -> None:
        assert await cache.get("nope", str) is None
        assert await cache.exists("nope") is False

    async def test_overwrite(self, cache: SQLCache, db: SQLiteBackend) -> None:
        await cache.set("a", "aaaaaa")
        await cache.set("a", "aaaaaaa")
        assert await cache.get("a", str) == "aaaaaaa"
        assert await _row_count(db) == 1

    async def test_overwrite_clears_expiry(self, cache: SQLCache) -> None:
        await cache.set("a", "x", ttl=60)
        await cache.set("a", "y")
        row = await cache.db.fetch_one("SELECT expires_at FROM cache WHERE name = 'a'")
        assert row == {"expires_at": None}

    async def test_delete(self, cache: SQLCache) -> None:
        await cache.set("user_id", 1)
        assert await cache.delete("user_id") is True
        assert await cache.get("user_id", type(None)) is None
        assert await cache.delete("user_id") is False

    async def test_exists(self, cache: SQLCache) -> None:
        await cache.set("a", 1)
        assert await cache.exists("a") is True

    async def test_clear_and_size(self, cache: SQLCache) -> None:
        await cache.set("a", 1)
        await cache.set("b", 2)
        assert await cache.size() == 2
        assert await cache.clear() == 2
        assert await cache.size() == 0

    async def test_clear_counts_expired_rows_too(
        self, cache: SQLCache, db: SQLiteBackend
    ) -> None:
        await cache.set("a", 1)
        await cache.set("b", 2, ttl=60)
        await _expire(db, "b")
        assert await cache.clear() == 2
        assert await cache.clear() == 0

    async def test_clear_uses_delete_row_count(self) -> None:
        db = MagicMock()
        db.execute_rowcount = AsyncMock(return_value=7)
        db.fetch_one = AsyncMock()
        db.commit = AsyncMock()
        assert await SQLCache(db).clear() == 7
        db.fetch_one.assert_not_awaited()
        db.commit.assert_awaited_once()

    async def test_cross_type_decode_error(self, cache: SQLCache) -> None:
        await cache.set("a", "hello")
        with pytest.raises(DecodeError):
            await cache.get("a", Account)

    async def test_concurrent_writers(self, cache: SQLCache) -> None:
        await asyncio.gather(*(cache.set("k", i) for i in range(20)))
        assert await cache.get("k", int) in range(20)

    async def test_persists_across_connections(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.db"
        first = SQLCache(await SQLiteBackend.connect(path))
        await first.ensure_schema()
        await first.set("k", "durable")
        await first.close()

        second = SQLCache(await SQLiteBackend.connect(path))
        try:
            assert await second.get("k", str) == "durable"
        finally:
            await second.close()


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


class TestSQLCacheExpiry:
    async def test_expired_entry_is_invisible_and_evicted(
        self, cache: SQLCache, db: SQLiteBackend
    ) -> None:
        await cache.set("k", "v", ttl=60)
        assert await cache.get("k", str) == "v"

        await _expire(db, "k")

        assert await cache.exists("k") is False
        assert await cache.size() == 0
        assert await cache.get("k", str) is None
        assert await _row_count(db) == 0

    async def test_real_clock_expiry(self, cache: SQLCache) -> None:
        await cache.set("k", "v", ttl=0.05)
        await asyncio.sleep(0.1)
        assert await cache.get("k", str) is None

    async def test_purge_expired(self, cache: SQLCache, db: SQLiteBackend) -> None:
        await cache.set("a", 1, ttl=60)
        await cache.set("b", 2, ttl=60)
        await cache.set("c", 3)
        await _expire(db, "a")
        await _expire(db, "b")
        assert await cache.purge_expired() == 2
        assert await _row_count(db) == 1
        assert await cache.purge_expired() == 0

    async def test_delete_expired_reports_false(
        self, cache: SQLCache, db: SQLiteBackend
    ) -> None:
        await cache.set("a", 1, ttl=60)
        await _expire(db, "a")
        assert await cache.delete("a") is False
        assert await _row_count(db) == 0


# ---------------------------------------------------------------------------
# Backend-specific failures
# ---------------------------------------------------------------------------


class TestSQLCacheErrors:
    async def test_key_too_long(self, cache: SQLCache) -> None:
        with pytest.raises(BackendError, match="limited to 255"):
            await cache.set("k" * 256, 1)

    async def test_non_utf8_bytes_key(self, cache: SQLCache) -> None:
        with pytest.raises(BackendError, match="UTF-8"):
            await cache.get(b"\xff\xfe", int)

    async def test_utf8_bytes_key(self, cache: SQLCache) -> None:
        await cache.set(b"bytes-key", 5)
        assert await cache.get("bytes-key", int) == 5

    async def test_malformed_payload(self, cache: SQLCache, db: SQLiteBackend) -> None:
        await db.execute("INSERT INTO cache (name, val) VALUES ('bad', 'zz')")
        await db.commit()
        with pytest.raises(BackendError, match="Malformed payload"):
            await cache.get("bad", str)

    async def test_missing_table(self, db: SQLiteBackend) -> None:
        sql_cache = SQLCache(db, table="never_created")
        with pytest.raises(BackendError):
            await sql_cache.get("a", int)
