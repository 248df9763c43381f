# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""cacheany - one async cache interface, any value type, any backend."""

__version__ = "1.1.3"

from cacheany.cache.base import Cache, CacheStats
from cacheany.cache.factory import create_cache, get_cache, reset_cache
from cacheany.cache.memory import MemoryCache
from cacheany.cacheable import Cacheable, decode, encode, from_hex, to_hex
from cacheany.core.exceptions import (
    BackendError,
    CacheError,
    ConfigurationError,
    DecodeError,
)

__all__ = [
    "BackendError",
    "Cache",
    "CacheError",
    "CacheStats",
    "Cacheable",
    "ConfigurationError",
    "DecodeError",
    "MemoryCache",
    "__version__",
    "create_cache",
    "decode",
    "encode",
    "from_hex",
    "get_cache",
    "reset_cache",
    "to_hex",
]
