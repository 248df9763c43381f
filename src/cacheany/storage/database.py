# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Database connection management with pluggable backend support.

Supports both SQLite (aiosqlite, default) and PostgreSQL (asyncpg).
"""

from __future__ import annotations

import logging
from pathlib import Path

from cacheany.core.exceptions import ConfigurationError
from cacheany.core.logging import redact_sensitive
from cacheany.storage.backend import DatabaseBackend

logger = logging.getLogger("cacheany.storage.database")


async def open_database(
    *,
    backend: str = "sqlite",
    db_path: Path | str = "cacheany.db",
    postgres_url: str = "",
    postgres_pool_min: int = 2,
    postgres_pool_max: int = 10,
) -> DatabaseBackend:
    """Open and return the requested :class:`DatabaseBackend`.

    Args:
        backend: ``"sqlite"`` or ``"postgres"``.
        db_path: Path for the SQLite database file.
        postgres_url: PostgreSQL DSN (``postgresql://...``).
        postgres_pool_min: Minimum pool size for PostgreSQL.
        postgres_pool_max: Maximum pool size for PostgreSQL.

    Raises:
        ConfigurationError: Unknown backend or missing PostgreSQL URL.
        BackendError: The database could not be opened.
    """
    chosen = backend.lower()

    if chosen == "sqlite":
        from cacheany.storage.sqlite_backend import SQLiteBackend

        logger.info("Opening SQLite database at %s", db_path)
        return await SQLiteBackend.connect(db_path)

    if chosen == "postgres":
        if not postgres_url:
            msg = (
                "PostgreSQL backend selected but no connection URL provided. "
                "Set CACHEANY_POSTGRES_URL or pass postgres_url."
            )
            raise ConfigurationError(msg)

        from cacheany.storage.postgres import PostgresDatabase

        logger.info("Connecting to PostgreSQL at %s", redact_sensitive(postgres_url))
        return await PostgresDatabase.create(
            postgres_url, min_size=postgres_pool_min, max_size=postgres_pool_max
        )

    msg = f"Unknown database backend: {backend!r}. Expected 'sqlite' or 'postgres'."
    raise ConfigurationError(msg)
