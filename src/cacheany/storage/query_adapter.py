# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Query parameter adapter for cross-database compatibility.

The SQL cache writes every statement with ``?`` placeholders (SQLite
style).  PostgreSQL expects ``$1, $2, ...`` instead, so :func:`adapt_query`
rewrites the markers for the target dialect.
"""

from __future__ import annotations

import itertools
import re

# A single-quoted SQL literal; ``''`` is an escaped quote inside it.
_STRING_LITERAL = re.compile(r"('(?:[^']|'')*')")


def adapt_query(query: str, dialect: str) -> str:
    """Rewrite ``?`` parameter placeholders for the target *dialect*.

    Args:
        query: SQL query with ``?`` positional placeholders.
        dialect: ``"sqlite"`` (no-op) or ``"postgres"`` (``$N``).

    Returns:
        The rewritten query string.

    Raises:
        ValueError: If *dialect* is not recognised.
    """
    if dialect == "sqlite":
        return query

    if dialect == "postgres":
        return _question_to_dollar(query)

    msg = f"Unknown SQL dialect: {dialect!r}. Expected 'sqlite' or 'postgres'."
    raise ValueError(msg)


def _question_to_dollar(query: str) -> str:
    """Number each ``?`` outside of string literals as ``$1``, ``$2``, ..."""
    counter = itertools.count(1)
    parts = _STRING_LITERAL.split(query)
    # split() with one capture group alternates code, literal, code, ...
    for i in range(0, len(parts), 2):
        parts[i] = re.sub(r"\?", lambda _m: f"${next(counter)}", parts[i])
    return "".join(parts)
