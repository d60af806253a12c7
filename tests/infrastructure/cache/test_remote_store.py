from __future__ import annotations

from datetime import timedelta
from typing import Any, cast
from unittest.mock import AsyncMock

import httpx
import pytest

from page_assistant.domain.exceptions.domain_exceptions import CacheTierError
from page_assistant.infrastructure.cache.remote_store import RemoteContentStore


class _FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code
        self.headers: dict[str, str] = {}

    def json(self) -> Any:
        return self._payload


def _store(clock) -> RemoteContentStore:
    return RemoteContentStore(
        "https://cache.example.org/",
        "anon-key",
        table="content_cache",
        user_scope="user-1",
        clock=clock,
    )


@pytest.mark.asyncio
async def test_read_returns_unexpired_content(clock) -> None:
    store = _store(clock)
    rows = [
        {
            "key": "k1",
            "content": "cached text",
            "expires_at": (clock.now + timedelta(hours=1)).isoformat(),
        }
    ]
    request = AsyncMock(return_value=_FakeResponse(rows))
    cast("Any", store._client).request = request

    assert await store.read("k1") == "cached text"

    method, path = request.call_args.args
    assert method == "GET"
    assert path == "/rest/v1/content_cache"
    params = request.call_args.kwargs["params"]
    assert params["key"] == "eq.k1"
    assert params["limit"] == "1"
    await store.aclose()


@pytest.mark.asyncio
async def test_read_deletes_expired_row(clock) -> None:
    store = _store(clock)
    rows = [{"key": "k1", "content": "old", "expires_at": "2024-12-31T00:00:00Z"}]
    request = AsyncMock(side_effect=[_FakeResponse(rows), _FakeResponse(None, 204)])
    cast("Any", store._client).request = request

    assert await store.read("k1") is None

    assert request.await_count == 2
    delete_call = request.call_args_list[1]
    assert delete_call.args[0] == "DELETE"
    assert delete_call.kwargs["params"] == {"key": "eq.k1"}
    await store.aclose()


@pytest.mark.asyncio
async def test_read_miss_on_empty_rows(clock) -> None:
    store = _store(clock)
    cast("Any", store._client).request = AsyncMock(return_value=_FakeResponse([]))

    assert await store.read("k1") is None
    await store.aclose()


@pytest.mark.asyncio
async def test_write_upserts_row_with_expiry(clock) -> None:
    store = _store(clock)
    request = AsyncMock(return_value=_FakeResponse(None, 201))
    cast("Any", store._client).request = request

    await store.write("k1", "page text", ttl_seconds=7200, url="https://example.com/a")

    call = request.call_args
    assert call.args[0] == "POST"
    assert call.kwargs["params"] == {"on_conflict": "key"}
    assert "merge-duplicates" in call.kwargs["headers"]["Prefer"]
    row = call.kwargs["json"]
    assert row["key"] == "k1"
    assert row["content"] == "page text"
    assert row["url"] == "https://example.com/a"
    assert row["user_scope"] == "user-1"
    assert row["expires_at"] == (clock.now + timedelta(hours=2)).isoformat()
    await store.aclose()


@pytest.mark.asyncio
async def test_server_error_becomes_tier_error(clock) -> None:
    store = _store(clock)
    cast("Any", store._client).request = AsyncMock(return_value=_FakeResponse({}, 500))

    with pytest.raises(CacheTierError) as exc_info:
        await store.read("k1")

    assert exc_info.value.tier == "remote"
    await store.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")]
)
async def test_transport_failure_becomes_tier_error(clock, error: Exception) -> None:
    store = _store(clock)
    cast("Any", store._client).request = AsyncMock(side_effect=error)

    with pytest.raises(CacheTierError):
        await store.write("k1", "v", ttl_seconds=60)
    await store.aclose()


@pytest.mark.asyncio
async def test_unexpected_body_shape_becomes_tier_error(clock) -> None:
    store = _store(clock)
    cast("Any", store._client).request = AsyncMock(return_value=_FakeResponse({"rows": []}))

    with pytest.raises(CacheTierError):
        await store.read("k1")
    await store.aclose()


def test_requires_credentials() -> None:
    with pytest.raises(ValueError, match="API key"):
        RemoteContentStore("https://cache.example.org", "")


@pytest.mark.asyncio
async def test_purge_expired_deletes_by_cutoff(clock) -> None:
    store = _store(clock)
    request = AsyncMock(return_value=_FakeResponse(None, 204))
    cast("Any", store._client).request = request

    await store.purge_expired()

    assert request.call_args.args[0] == "DELETE"
    assert request.call_args.kwargs["params"] == {"expires_at": f"lt.{clock.now.isoformat()}"}
    await store.aclose()


@pytest.mark.asyncio
async def test_rows_are_shared_across_scopes(clock) -> None:
    rows = [
        {
            "key": "k1",
            "content": "written by user-2",
            "user_scope": "user-2",
            "expires_at": (clock.now + timedelta(hours=1)).isoformat(),
        }
    ]
    store = _store(clock)
    request = AsyncMock(return_value=_FakeResponse(rows))
    cast("Any", store._client).request = request

    assert await store.read("k1") == "written by user-2"
    assert "user_scope" not in request.call_args.kwargs["params"]
    await store.aclose()
