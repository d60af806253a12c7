from __future__ import annotations

import json

import fakeredis.aioredis
import pytest

from page_assistant.domain.exceptions.domain_exceptions import CacheTierError
from page_assistant.infrastructure.cache.redis_store import RedisContentStore, redis_key


@pytest.fixture
def redis_client():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.mark.asyncio
async def test_write_then_read(redis_client, clock) -> None:
    store = RedisContentStore(redis_client, prefix="test", clock=clock)

    await store.write("abc", "page text", ttl_seconds=60, url="https://example.com")

    assert await store.read("abc") == "page text"
    raw = await redis_client.get("test:content:abc")
    doc = json.loads(raw)
    assert doc["url"] == "https://example.com"
    assert doc["payload"] == "page text"


@pytest.mark.asyncio
async def test_sets_key_expiry(redis_client, clock) -> None:
    store = RedisContentStore(redis_client, prefix="test", clock=clock)

    await store.write("abc", "page text", ttl_seconds=60)

    ttl_ms = await redis_client.pttl("test:content:abc")
    assert 0 < ttl_ms <= 60_000


@pytest.mark.asyncio
async def test_expired_document_is_a_miss(redis_client, clock) -> None:
    """The stored expiry is honoured even while Redis still holds the key."""
    store = RedisContentStore(redis_client, prefix="test", clock=clock)
    await store.write("abc", "page text", ttl_seconds=60)

    clock.advance(61)

    assert await store.read("abc") is None
    assert await redis_client.exists("test:content:abc") == 0


@pytest.mark.asyncio
async def test_undecodable_document_raises_tier_error(redis_client, clock) -> None:
    store = RedisContentStore(redis_client, prefix="test", clock=clock)
    await redis_client.set("test:content:abc", "not json")

    with pytest.raises(CacheTierError):
        await store.read("abc")

    assert await redis_client.exists("test:content:abc") == 0


@pytest.mark.asyncio
async def test_missing_key_is_none(redis_client, clock) -> None:
    store = RedisContentStore(redis_client, prefix="test", clock=clock)

    assert await store.read("nope") is None


def test_redis_key_skips_empty_parts() -> None:
    assert redis_key("pa", "content", "", "k") == "pa:content:k"
