from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import TYPE_CHECKING, Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from page_assistant.core.time_utils import parse_iso_timestamp, utc_now
from page_assistant.domain.exceptions.domain_exceptions import CacheTierError
from page_assistant.domain.models.cache_entry import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from page_assistant.config import CacheConfig

logger = logging.getLogger(__name__)


def redis_key(prefix: str, *parts: str) -> str:
    """Compose a namespaced Redis key."""
    safe_parts = [part for part in parts if part]
    return ":".join([prefix, *safe_parts])


class RedisContentStore:
    """Ephemeral cache tier backed by a Redis instance local to the device or host.

    Values are JSON documents carrying their own ``expires_at`` so that the
    validity check does not depend on Redis key expiry alone.
    """

    name = "local"

    def __init__(
        self,
        client: aioredis.Redis,
        *,
        prefix: str = "pa",
        timeout_sec: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._timeout = max(0.05, float(timeout_sec))
        self._clock = clock

    @classmethod
    def from_config(cls, cfg: CacheConfig) -> RedisContentStore:
        client = aioredis.from_url(
            cfg.redis_url,
            socket_timeout=cfg.tier_timeout_sec,
            decode_responses=True,
        )
        return cls(client, prefix=cfg.redis_prefix, timeout_sec=cfg.tier_timeout_sec)

    def _key(self, key: str) -> str:
        return redis_key(self._prefix, "content", key)

    async def read(self, key: str) -> str | None:
        raw = await self._call(self._client.get(self._key(key)), op="get")
        if raw is None:
            return None

        try:
            doc: dict[str, Any] = json.loads(raw)
            expires_at = parse_iso_timestamp(doc["expires_at"])
            payload = doc["payload"]
        except (ValueError, KeyError, TypeError) as exc:
            await self.delete(key)
            msg = "Undecodable local cache entry"
            raise CacheTierError(msg, tier=self.name, details={"key": key[:12]}) from exc

        if self._clock() < expires_at and isinstance(payload, str):
            return payload

        await self.delete(key)
        return None

    async def write(
        self, key: str, value: str, *, ttl_seconds: float, url: str | None = None
    ) -> None:
        entry = CacheEntry.create(key, value, now=self._clock(), ttl_seconds=ttl_seconds)
        doc = json.dumps(
            {
                "payload": entry.payload,
                "url": url,
                "created_at": entry.created_at.isoformat(),
                "expires_at": entry.expires_at.isoformat(),
            },
            ensure_ascii=False,
        )
        await self._call(
            self._client.set(self._key(key), doc, px=max(1, math.ceil(ttl_seconds * 1000))),
            op="set",
        )

    async def delete(self, key: str) -> None:
        await self._call(self._client.delete(self._key(key)), op="delete")

    async def sweep(self) -> int:
        """Redis expires keys on its own; nothing to sweep client-side."""
        return 0

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, awaitable: Any, *, op: str) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError as exc:
            msg = f"Redis {op} timed out"
            raise CacheTierError(msg, tier=self.name) from exc
        except RedisError as exc:
            msg = f"Redis {op} failed: {exc}"
            raise CacheTierError(msg, tier=self.name) from exc
