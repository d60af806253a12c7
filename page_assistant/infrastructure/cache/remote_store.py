"""Durable cache tier backed by a PostgREST-style ``content_cache`` table."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import httpx

from page_assistant.core.async_utils import raise_if_cancelled
from page_assistant.core.time_utils import parse_iso_timestamp, utc_now
from page_assistant.domain.exceptions.domain_exceptions import CacheTierError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from page_assistant.config import CacheConfig

logger = logging.getLogger(__name__)

_OK_STATUSES = frozenset({200, 201, 204})


class RemoteContentStore:
    """Remote cache tier speaking the PostgREST dialect.

    Rows: ``content_cache(key, url, content, user_scope, expires_at, created_at)``.
    Reads select by key and check ``expires_at`` client-side so that an expired
    row can be deleted as a side effect. Writes upsert on ``key``.

    Keys identify the page, not the user, so rows are shared: ``user_scope``
    records which scope last wrote a row and never filters reads, deletes or
    the expiry purge.
    """

    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "content_cache",
        user_scope: str = "anonymous",
        timeout_sec: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not base_url or not api_key:
            msg = "Remote cache requires a base URL and an API key"
            raise ValueError(msg)

        self._table_path = f"/rest/v1/{table}"
        self._user_scope = user_scope
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_sec),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    @classmethod
    def from_config(cls, cfg: CacheConfig) -> RemoteContentStore:
        return cls(
            cfg.remote_url or "",
            cfg.remote_key or "",
            table=cfg.remote_table,
            user_scope=cfg.user_scope,
            timeout_sec=cfg.tier_timeout_sec,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def read(self, key: str) -> str | None:
        params = {"select": "key,content,expires_at", "key": f"eq.{key}", "limit": "1"}
        response = await self._request("GET", params=params, op="select")
        rows = self._decode_rows(response)
        if not rows:
            return None

        row = rows[0]
        content = row.get("content")
        expires_raw = row.get("expires_at")
        if not isinstance(content, str) or not content or not isinstance(expires_raw, str):
            logger.warning("remote_cache_invalid_row", extra={"key": key[:12]})
            await self._safe_delete(key)
            return None

        try:
            expires_at = parse_iso_timestamp(expires_raw)
        except ValueError:
            logger.warning("remote_cache_invalid_expiry", extra={"key": key[:12]})
            await self._safe_delete(key)
            return None

        if self._clock() < expires_at:
            return content

        logger.debug("remote_cache_entry_expired", extra={"key": key[:12]})
        await self._safe_delete(key)
        return None

    async def write(
        self, key: str, value: str, *, ttl_seconds: float, url: str | None = None
    ) -> None:
        if ttl_seconds <= 0:
            msg = "ttl_seconds must be positive"
            raise ValueError(msg)
        now = self._clock()
        row = {
            "key": key,
            "url": url or "",
            "content": value,
            "user_scope": self._user_scope,
            "expires_at": (now + timedelta(seconds=ttl_seconds)).isoformat(),
            "created_at": now.isoformat(),
        }
        await self._request(
            "POST",
            params={"on_conflict": "key"},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            op="upsert",
        )

    async def delete(self, key: str) -> None:
        await self._request("DELETE", params={"key": f"eq.{key}"}, op="delete")

    async def purge_expired(self) -> None:
        """Delete every row whose ``expires_at`` has passed."""
        cutoff = self._clock().isoformat()
        await self._request("DELETE", params={"expires_at": f"lt.{cutoff}"}, op="purge")

    async def _safe_delete(self, key: str) -> None:
        try:
            await self.delete(key)
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.warning(
                "remote_cache_delete_failed",
                extra={"key": key[:12], "error": str(exc)},
            )

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str],
        op: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, self._table_path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            msg = f"Remote cache {op} timed out"
            raise CacheTierError(msg, tier=self.name) from exc
        except httpx.HTTPError as exc:
            msg = f"Remote cache {op} failed: {exc}"
            raise CacheTierError(msg, tier=self.name) from exc

        if response.status_code not in _OK_STATUSES:
            msg = f"Remote cache {op} returned HTTP {response.status_code}"
            raise CacheTierError(msg, tier=self.name, details={"status_code": response.status_code})
        return response

    def _decode_rows(self, response: httpx.Response) -> list[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError as exc:
            msg = "Remote cache returned a non-JSON body"
            raise CacheTierError(msg, tier=self.name) from exc
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            msg = "Remote cache returned an unexpected body shape"
            raise CacheTierError(msg, tier=self.name)
        return data
