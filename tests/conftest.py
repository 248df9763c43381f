# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

import pytest


@pytest.fixture(autouse=True)
def _clear_cache():
    """Reset the cache singleton between tests."""
    from cacheany.cache.factory import reset_cache

    reset_cache()
    yield
    reset_cache()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep CACHEANY_* variables and stray .env files out of the tests."""
    import os

    for name in list(os.environ):
        if name.startswith("CACHEANY_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
