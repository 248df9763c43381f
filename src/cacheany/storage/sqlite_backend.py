# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite implementation of the abstract :class:`DatabaseBackend`.

Wraps an :mod:`aiosqlite` connection and exposes the uniform query
interface used by the SQL cache.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite

from cacheany.core.exceptions import BackendError
from cacheany.storage.backend import DatabaseBackend


class SQLiteBackend(DatabaseBackend):
    """Async SQLite backend backed by an :class:`aiosqlite.Connection`."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    async def connect(cls, db_path: Path | str = "cacheany.db") -> SQLiteBackend:
        """Open *db_path* and return a ready-to-use backend.

        Enables WAL mode for concurrent read performance.  Pass
        ``":memory:"`` for a throwaway in-process database.

        Raises:
            BackendError: If the database cannot be opened.
        """
        try:
            conn = await aiosqlite.connect(str(db_path))
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA journal_mode=WAL")
        except aiosqlite.Error as exc:
            msg = f"Failed to open SQLite database at {db_path}: {exc}"
            raise BackendError(msg) from exc
        return cls(conn)

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    async def execute(self, query: str, params: tuple[Any, ...] | None = None) -> Any:
        try:
            if params:
                return await self._conn.execute(query, params)
            return await self._conn.execute(query)
        except aiosqlite.Error as exc:
            msg = f"SQLite query failed: {exc}"
            raise BackendError(msg) from exc

    async def execute_rowcount(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> int:
        cursor = await self.execute(query, params)
        return max(cursor.rowcount, 0)

    async def fetch_one(
        self, query: str, params: tuple[Any, ...] | None = None
    ) -> dict[str, Any] | None:
        cursor = await self.execute(query, params)
        try:
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            msg = f"SQLite fetch failed: {exc}"
            raise BackendError(msg) from exc
        if row is None:
            return None
        return dict(row)

    # ------------------------------------------------------------------
    # Transaction / connection lifecycle
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        try:
            await self._conn.commit()
        except aiosqlite.Error as exc:
            msg = f"SQLite commit failed: {exc}"
            raise BackendError(msg) from exc

    async def close(self) -> None:
        await self._conn.close()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def backend_name(self) -> str:
        return "sqlite"

    @property
    def raw_connection(self) -> aiosqlite.Connection:
        """Return the underlying :class:`aiosqlite.Connection`."""
        return self._conn
