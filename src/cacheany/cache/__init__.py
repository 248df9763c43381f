# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache contract and its backends."""

from cacheany.cache.base import Cache, CacheStats
from cacheany.cache.factory import create_cache, get_cache, reset_cache
from cacheany.cache.memory import MemoryCache

__all__ = [
    "Cache",
    "CacheStats",
    "MemoryCache",
    "create_cache",
    "get_cache",
    "reset_cache",
]
