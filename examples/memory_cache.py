# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Store values of different types in one cache and read them back typed.

Run with:  python examples/memory_cache.py
"""

from __future__ import annotations

import asyncio
import struct
from typing import Self

from pydantic import BaseModel

from cacheany import Cacheable, DecodeError, MemoryCache
from cacheany.core.config import get_settings
from cacheany.core.logging import setup_logging


class User(BaseModel):
    id: int
    name: str


class Rgb(Cacheable):
    """A colour packed into three bytes."""

    def __init__(self, r: int, g: int, b: int) -> None:
        self.r, self.g, self.b = r, g, b

    def __repr__(self) -> str:
        return f"Rgb({self.r}, {self.g}, {self.b})"

    def to_bytes(self) -> bytes:
        return struct.pack(">BBB", self.r, self.g, self.b)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        return cls(*struct.unpack(">BBB", data))


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    async with MemoryCache() as cache:
        assert await cache.size() == 0

        await cache.set("username", "Jack")
        await cache.set("user_id", 13)
        await cache.set("user", User(id=13, name="Jack"))
        await cache.set("colour", Rgb(255, 128, 0), ttl=60)

        print(await cache.get("username", str))
        print(await cache.get("user_id", int))
        print(await cache.get("user", User))
        print(await cache.get("colour", Rgb))

        try:
            await cache.get("username", User)
        except DecodeError as exc:
            print(f"wrong type: {exc}")

        await cache.delete("username")
        assert await cache.get("username", str) is None
        print(f"{await cache.size()} entries, stats={cache.stats.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main())
