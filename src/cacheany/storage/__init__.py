# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Storage layer -- async database backends used by the SQL cache."""

from cacheany.storage.backend import DatabaseBackend
from cacheany.storage.database import open_database
from cacheany.storage.query_adapter import adapt_query

__all__ = [
    "DatabaseBackend",
    "adapt_query",
    "open_database",
]
