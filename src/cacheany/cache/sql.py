# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Relational cache backend on top of a :class:`DatabaseBackend`.

Entries live in a single table (``cache`` by default) with one row per
key.  Payloads are stored as hex text so the same schema works on SQLite
and PostgreSQL; expiry is a wall-clock epoch timestamp so several
processes sharing the database agree on it.
"""

from __future__ import annotations

import logging
import re
import time

from cacheany.cache.base import TTL, Cache, Key
from cacheany.core.exceptions import BackendError, ConfigurationError
from cacheany.storage.backend import DatabaseBackend

logger = logging.getLogger("cacheany.cache.sql")

MAX_KEY_LENGTH = 255

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(kind: str, name: str) -> str:
    if not _IDENTIFIER.match(name):
        msg = f"Invalid SQL {kind} name: {name!r}"
        raise ConfigurationError(msg)
    return name


class SQLCache(Cache):
    """Cache stored in a relational table.

    Args:
        db: An open :class:`DatabaseBackend`.
        table: Table name.
        key_field: Column holding the key.
        value_field: Column holding the hex-encoded payload.
        expires_field: Column holding the expiry as epoch seconds.
        default_ttl: TTL applied when :meth:`set` is called without one.

    Raises:
        ConfigurationError: If a table or column name is not a plain
            SQL identifier.
    """

    def __init__(
        self,
        db: DatabaseBackend,
        *,
        table: str = "cache",
        key_field: str = "name",
        value_field: str = "val",
        expires_field: str = "expires_at",
        default_ttl: TTL = None,
    ) -> None:
        super().__init__(default_ttl=default_ttl)
        self._db = db
        self._table = _check_identifier("table", table)
        self._key = _check_identifier("column", key_field)
        self._val = _check_identifier("column", value_field)
        self._exp = _check_identifier("column", expires_field)

    @property
    def table(self) -> str:
        return self._table

    @property
    def db(self) -> DatabaseBackend:
        """Return the underlying database backend."""
        return self._db

    async def ensure_schema(self) -> None:
        """Create the cache table if it does not exist yet."""
        await self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {self._table} ("
            f"{self._key} VARCHAR({MAX_KEY_LENGTH}) NOT NULL PRIMARY KEY, "
            f"{self._val} TEXT NOT NULL, "
            f"{self._exp} DOUBLE PRECISION)"
        )
        await self._db.commit()

    # ------------------------------------------------------------------
    # Cache interface
    # ------------------------------------------------------------------

    async def get_raw(self, key: Key) -> bytes | None:
        name = self._sql_key(key)
        row = await self._db.fetch_one(
            f"SELECT {self._val} AS val, {self._exp} AS expires_at "  # noqa: S608
            f"FROM {self._table} WHERE {self._key} = ?",
            (name,),
        )
        if row is None:
            return None
        if _is_expired(row["expires_at"], time.time()):
            await self._evict_expired(name)
            return None
        try:
            return bytes.fromhex(row["val"])
        except (TypeError, ValueError) as exc:
            msg = f"Malformed payload stored for key {name!r} in {self._table}"
            raise BackendError(msg) from exc

    async def set_raw(self, key: Key, data: bytes, ttl: float | None = None) -> None:
        name = self._sql_key(key)
        expires_at = (time.time() + ttl) if ttl is not None else None
        await self._db.execute(
            f"INSERT INTO {self._table} ({self._key}, {self._val}, {self._exp}) "  # noqa: S608
            f"VALUES (?, ?, ?) "
            f"ON CONFLICT ({self._key}) DO UPDATE SET "
            f"{self._val} = excluded.{self._val}, {self._exp} = excluded.{self._exp}",
            (name, bytes(data).hex(), expires_at),
        )
        await self._db.commit()

    async def delete(self, key: Key) -> bool:
        name = self._sql_key(key)
        live = await self.exists(name)
        await self._db.execute(
            f"DELETE FROM {self._table} WHERE {self._key} = ?",  # noqa: S608
            (name,),
        )
        await self._db.commit()
        return live

    async def exists(self, key: Key) -> bool:
        name = self._sql_key(key)
        row = await self._db.fetch_one(
            f"SELECT 1 AS present FROM {self._table} "  # noqa: S608
            f"WHERE {self._key} = ? AND ({self._exp} IS NULL OR {self._exp} > ?)",
            (name, time.time()),
        )
        return row is not None

    async def clear(self) -> int:
        count = await self._db.execute_rowcount(f"DELETE FROM {self._table}")  # noqa: S608
        await self._db.commit()
        logger.info("Cleared %d rows from %s", count, self._table)
        return count

    async def size(self) -> int:
        row = await self._db.fetch_one(
            f"SELECT COUNT(*) AS n FROM {self._table} "  # noqa: S608
            f"WHERE {self._exp} IS NULL OR {self._exp} > ?",
            (time.time(),),
        )
        return int(row["n"]) if row else 0

    async def close(self) -> None:
        await self._db.close()

    async def purge_expired(self) -> int:
        """Delete every row whose expiry has passed.

        Returns:
            The number of rows removed.
        """
        count = await self._db.execute_rowcount(
            f"DELETE FROM {self._table} "  # noqa: S608
            f"WHERE {self._exp} IS NOT NULL AND {self._exp} <= ?",
            (time.time(),),
        )
        await self._db.commit()
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _evict_expired(self, name: str) -> None:
        await self._db.execute(
            f"DELETE FROM {self._table} "  # noqa: S608
            f"WHERE {self._key} = ? AND {self._exp} IS NOT NULL AND {self._exp} <= ?",
            (name, time.time()),
        )
        await self._db.commit()

    @staticmethod
    def _sql_key(key: Key) -> str:
        """Validate *key* against the column constraints."""
        if isinstance(key, str):
            name = key
        else:
            try:
                name = bytes(key).decode("utf-8")
            except UnicodeDecodeError as exc:
                msg = "SQL cache keys must be valid UTF-8"
                raise BackendError(msg) from exc
        if len(name) > MAX_KEY_LENGTH:
            msg = f"SQL cache keys are limited to {MAX_KEY_LENGTH} characters, got {len(name)}"
            raise BackendError(msg)
        return name


def _is_expired(expires_at: float | None, now: float) -> bool:
    return expires_at is not None and float(expires_at) <= now
