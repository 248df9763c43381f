# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Byte serialization contract for values stored in a cache.

A cache only ever holds bytes.  :func:`encode` turns a value into bytes and
:func:`decode` rebuilds a value of a caller-chosen type from them, so a
single cache instance can hold ints, strings and arbitrary models side by
side.  No type tag is stored: the reader must know what it wrote.

Built-in encodings:

* ``bytes`` / ``bytearray`` / ``memoryview`` -- stored as-is
* ``str`` -- UTF-8
* ``bool`` -- a single ``0x00`` / ``0x01`` byte
* ``int`` -- minimal big-endian two's complement
* ``float`` -- 8-byte IEEE-754 big-endian
* ``None`` -- empty payload
* pydantic models -- ``model_dump_json()``
* anything else pydantic can serialise -- JSON

Application types can take full control by subclassing :class:`Cacheable`.
"""

from __future__ import annotations

import abc
import functools
import struct
import types
from typing import Any, Self, TypeVar

import pydantic_core
from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from cacheany.core.exceptions import DecodeError

T = TypeVar("T")

_FLOAT = struct.Struct(">d")


class Cacheable(abc.ABC):
    """Mixin for application types that define their own byte encoding.

    Subclasses implement :meth:`to_bytes` (must never fail) and
    :meth:`from_bytes`.  Any exception raised by :meth:`from_bytes` is
    reported to the caller as a :class:`DecodeError`.
    """

    @abc.abstractmethod
    def to_bytes(self) -> bytes:
        """Return the byte encoding of this value."""

    @classmethod
    @abc.abstractmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Rebuild a value from bytes produced by :meth:`to_bytes`."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode(value: Any) -> bytes:
    """Convert *value* to its byte payload.

    Raises:
        TypeError: If *value* has no known encoding.
    """
    if isinstance(value, Cacheable):
        return bytes(value.to_bytes())
    if isinstance(value, BaseModel):
        return value.model_dump_json().encode()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return b"\x01" if value else b"\x00"
    if isinstance(value, int):
        return _encode_int(value)
    if isinstance(value, float):
        return _FLOAT.pack(value)
    if value is None:
        return b""
    try:
        return pydantic_core.to_json(value)
    except pydantic_core.PydanticSerializationError as exc:
        msg = f"Value of type {type(value).__name__} is not cacheable: {exc}"
        raise TypeError(msg) from exc


def _encode_int(value: int) -> bytes:
    length = (value.bit_length() + 8) // 8
    return int(value).to_bytes(length, "big", signed=True)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(data: bytes, type_: type[T]) -> T:
    """Rebuild a value of *type_* from *data*.

    Raises:
        DecodeError: If *data* is not a valid encoding for *type_*.
    """
    name = _type_name(type_)

    if type_ is None or type_ is type(None):
        if data:
            raise DecodeError(name, len(data), "expected an empty payload")
        return None  # type: ignore[return-value]

    if isinstance(type_, type) and not isinstance(type_, types.GenericAlias):
        if issubclass(type_, Cacheable):
            try:
                return type_.from_bytes(bytes(data))  # type: ignore[return-value]
            except DecodeError:
                raise
            except Exception as exc:
                raise DecodeError(name, len(data), str(exc)) from exc

        if issubclass(type_, BaseModel):
            try:
                return type_.model_validate_json(data)  # type: ignore[return-value]
            except ValidationError as exc:
                raise DecodeError(name, len(data), _first_error(exc)) from exc

        if issubclass(type_, memoryview):
            return memoryview(bytes(data))  # type: ignore[return-value]

        if issubclass(type_, (bytes, bytearray)):
            return type_(data)  # type: ignore[return-value]

        if issubclass(type_, str):
            try:
                text = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError(name, len(data), "invalid UTF-8") from exc
            return _construct(type_, text, name, len(data))

        if issubclass(type_, bool):
            if len(data) != 1 or data[0] > 1:
                raise DecodeError(name, len(data), "expected a single 0x00/0x01 byte")
            return _construct(type_, data[0] == 1, name, len(data))

        if issubclass(type_, int):
            if not data:
                raise DecodeError(name, 0, "empty payload")
            value = int.from_bytes(data, "big", signed=True)
            return _construct(type_, value, name, len(data))

        if issubclass(type_, float):
            if len(data) != _FLOAT.size:
                raise DecodeError(name, len(data), f"expected {_FLOAT.size} bytes")
            return _construct(type_, _FLOAT.unpack(data)[0], name, len(data))

    try:
        adapter = _adapter(type_)
    except (PydanticSchemaGenerationError, TypeError) as exc:
        raise DecodeError(name, len(data), "unsupported type") from exc
    try:
        return adapter.validate_json(data)
    except ValidationError as exc:
        raise DecodeError(name, len(data), _first_error(exc)) from exc


def to_hex(value: Any) -> str:
    """Encode *value* and return the payload as lowercase hex text."""
    return encode(value).hex()


def from_hex(text: str, type_: type[T]) -> T:
    """Decode a hex payload produced by :func:`to_hex`."""
    try:
        data = bytes.fromhex(text)
    except ValueError as exc:
        raise DecodeError(_type_name(type_), len(text), "invalid hex payload") from exc
    return decode(data, type_)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _construct(type_: type[T], value: Any, name: str, size: int) -> T:
    """Build *type_* from a decoded base value (enum members, subclasses)."""
    if type(value) is type_:
        return value  # type: ignore[no-any-return]
    try:
        return type_(value)  # type: ignore[call-arg]
    except (TypeError, ValueError) as exc:
        raise DecodeError(name, size, str(exc)) from exc


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return str(errors[0].get("msg", exc))


def _type_name(type_: Any) -> str:
    if type_ is None:
        return "None"
    return getattr(type_, "__name__", None) or repr(type_)
