from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from page_assistant.config.cache import LocalBackend
from page_assistant.core.async_utils import raise_if_cancelled
from page_assistant.core.time_utils import utc_now
from page_assistant.infrastructure.cache.memory_store import MemoryContentStore
from page_assistant.infrastructure.cache.redis_store import RedisContentStore
from page_assistant.infrastructure.cache.remote_store import RemoteContentStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from page_assistant.config import CacheConfig
    from page_assistant.infrastructure.cache.protocol import ContentStore

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_TTL_SECONDS = 3600


class TieredContentCache:
    """Read-through cache over a durable remote tier and an ephemeral local tier.

    Reads consult the remote tier first when it is configured; a remote hit is
    returned as-is and is not copied into the local tier. Any tier failure is
    logged and treated as a miss, so callers cannot tell an error from a miss.
    Writes go to every configured tier and never raise.
    """

    def __init__(
        self,
        *,
        remote: ContentStore | None = None,
        local: ContentStore | None = None,
        local_ttl_seconds: float = DEFAULT_LOCAL_TTL_SECONDS,
        remote_ttl_seconds: float | None = None,
    ) -> None:
        if local_ttl_seconds <= 0:
            msg = "local_ttl_seconds must be positive"
            raise ValueError(msg)
        if remote_ttl_seconds is not None and remote_ttl_seconds <= 0:
            msg = "remote_ttl_seconds must be positive"
            raise ValueError(msg)

        self._remote = remote
        self._local = local
        self._local_ttl = float(local_ttl_seconds)
        self._remote_ttl = float(remote_ttl_seconds or local_ttl_seconds)

    @classmethod
    def from_config(
        cls, cfg: CacheConfig, *, clock: Callable[[], datetime] = utc_now
    ) -> TieredContentCache:
        """Build the tiers described by ``cfg``.

        The remote tier is created only when it is enabled and both its URL and
        key are present; otherwise the cache runs on the local tier alone.
        """
        remote: ContentStore | None = None
        if cfg.remote_configured:
            remote = RemoteContentStore.from_config(cfg)
        elif cfg.remote_enabled:
            logger.warning("remote_cache_enabled_without_credentials")

        local: ContentStore | None = None
        if cfg.local_enabled:
            if cfg.local_backend is LocalBackend.REDIS:
                local = RedisContentStore.from_config(cfg)
            else:
                local = MemoryContentStore(clock=clock)

        logger.info(
            "content_cache_initialized",
            extra={
                "remote": remote is not None,
                "local_backend": str(cfg.local_backend) if local is not None else None,
                "remote_ttl_hours": cfg.remote_ttl_hours,
                "local_ttl_seconds": cfg.local_ttl_seconds,
            },
        )
        return cls(
            remote=remote,
            local=local,
            local_ttl_seconds=cfg.local_ttl_seconds,
            remote_ttl_seconds=cfg.remote_ttl_hours * 3600,
        )

    @property
    def enabled(self) -> bool:
        return self._remote is not None or self._local is not None

    @property
    def has_remote(self) -> bool:
        return self._remote is not None

    async def get(self, key: str) -> str | None:
        """Return the cached text for ``key`` or None on miss or tier failure."""
        for store in self._tiers():
            try:
                value = await store.read(key)
            except Exception as exc:
                raise_if_cancelled(exc)
                logger.warning(
                    "content_cache_read_failed",
                    exc_info=True,
                    extra={"tier": store.name, "key": key[:12], "error": str(exc)},
                )
                continue
            if value is not None:
                logger.debug("content_cache_hit", extra={"tier": store.name, "key": key[:12]})
                return value

        logger.debug("content_cache_miss", extra={"key": key[:12]})
        return None

    async def put(
        self,
        key: str,
        value: str,
        ttl_seconds: float | None = None,
        *,
        url: str | None = None,
    ) -> None:
        """Write ``value`` to every configured tier.

        Args:
            key: Cache key from :class:`HashKeyDeriver`.
            value: Extracted page text.
            ttl_seconds: Lifetime applied to all tiers. Defaults to each tier's
                configured TTL.
            url: Source URL, stored alongside the remote row.
        """
        if ttl_seconds is not None and ttl_seconds <= 0:
            msg = "ttl_seconds must be positive"
            raise ValueError(msg)

        for store in self._tiers():
            ttl = ttl_seconds
            if ttl is None:
                ttl = self._remote_ttl if store is self._remote else self._local_ttl
            try:
                await store.write(key, value, ttl_seconds=ttl, url=url)
            except Exception as exc:
                raise_if_cancelled(exc)
                logger.warning(
                    "content_cache_write_failed",
                    exc_info=True,
                    extra={"tier": store.name, "key": key[:12], "error": str(exc)},
                )

    async def sweep(self) -> int:
        """Evict expired local entries and purge expired remote rows.

        Returns the number of local entries removed. Failures of either tier
        are logged and do not stop the other.
        """
        removed = 0
        local_sweep = getattr(self._local, "sweep", None)
        if local_sweep is not None:
            try:
                removed = await local_sweep()
            except Exception as exc:
                raise_if_cancelled(exc)
                logger.warning("content_cache_sweep_failed", extra={"error": str(exc)})

        remote_purge = getattr(self._remote, "purge_expired", None)
        if remote_purge is not None:
            try:
                await remote_purge()
            except Exception as exc:
                raise_if_cancelled(exc)
                logger.warning("remote_cache_purge_failed", extra={"error": str(exc)})
        return removed

    async def run_periodic_sweep(self, interval_sec: float = DEFAULT_LOCAL_TTL_SECONDS) -> None:
        """Run :meth:`sweep` every ``interval_sec`` seconds until cancelled.

        Each pass evicts expired local entries and purges expired remote rows.
        """
        if interval_sec <= 0:
            msg = "interval_sec must be positive"
            raise ValueError(msg)
        while True:
            await asyncio.sleep(interval_sec)
            await self.sweep()

    async def aclose(self) -> None:
        for store in self._tiers():
            close = getattr(store, "aclose", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as exc:
                raise_if_cancelled(exc)
                logger.warning(
                    "content_cache_close_failed", extra={"tier": store.name, "error": str(exc)}
                )

    def _tiers(self) -> list[ContentStore]:
        return [store for store in (self._remote, self._local) if store is not None]
