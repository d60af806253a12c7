"""Interface shared by the content cache tiers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentStore(Protocol):
    """A single cache tier keyed by cache key.

    Implementations raise on failure; the tiered cache decides how to degrade.
    A read of an expired entry must evict it and report a miss.
    """

    name: str

    async def read(self, key: str) -> str | None:
        """Return the valid payload stored under ``key`` or None."""
        ...

    async def write(
        self, key: str, value: str, *, ttl_seconds: float, url: str | None = None
    ) -> None:
        """Insert or replace ``key`` with ``value`` for ``ttl_seconds``."""
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...
