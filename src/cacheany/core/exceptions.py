# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for cacheany."""

from __future__ import annotations


class CacheError(Exception):
    """Base exception for all cacheany errors."""


class ConfigurationError(CacheError):
    """Invalid or missing configuration."""


class BackendError(CacheError):
    """The storage backend could not be reached or reported a failure."""


class DecodeError(CacheError):
    """Stored bytes could not be interpreted as the requested type.

    Args:
        type_name: Name of the type the caller asked for.
        payload_size: Length of the payload that failed to decode.
        reason: Human-readable cause.
    """

    def __init__(self, type_name: str, payload_size: int, reason: str = "") -> None:
        self.type_name = type_name
        self.payload_size = payload_size
        self.reason = reason
        msg = f"Cannot decode {payload_size}-byte payload as {type_name}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
