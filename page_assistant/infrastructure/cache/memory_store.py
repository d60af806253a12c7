from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from page_assistant.core.time_utils import utc_now
from page_assistant.domain.models.cache_entry import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

logger = logging.getLogger(__name__)


class MemoryContentStore:
    """Process-local TTL store used as the ephemeral cache tier.

    Entries live in a plain dict. Reads and writes never await, so each
    operation is atomic on the event loop; concurrent writers to one key
    resolve as last-writer-wins.
    """

    name = "local"

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    async def read(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_valid(self._clock()):
            return entry.payload

        # Only drop the entry we inspected; a concurrent write may have replaced it.
        if self._entries.get(key) is entry:
            del self._entries[key]
        logger.debug("local_cache_entry_expired", extra={"key": key[:12]})
        return None

    async def write(
        self, key: str, value: str, *, ttl_seconds: float, url: str | None = None
    ) -> None:
        self._entries[key] = CacheEntry.create(
            key, value, now=self._clock(), ttl_seconds=ttl_seconds
        )

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def sweep(self) -> int:
        """Evict every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("local_cache_swept", extra={"removed": len(expired)})
        return len(expired)

    async def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count
