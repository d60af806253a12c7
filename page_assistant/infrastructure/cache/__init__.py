"""Content cache tiers and key derivation."""

from page_assistant.infrastructure.cache.keys import CACHE_KEY_LENGTH, HashKeyDeriver, is_cache_key
from page_assistant.infrastructure.cache.memory_store import MemoryContentStore
from page_assistant.infrastructure.cache.protocol import ContentStore
from page_assistant.infrastructure.cache.redis_store import RedisContentStore, redis_key
from page_assistant.infrastructure.cache.remote_store import RemoteContentStore
from page_assistant.infrastructure.cache.tiered_cache import TieredContentCache

__all__ = [
    "CACHE_KEY_LENGTH",
    "ContentStore",
    "HashKeyDeriver",
    "MemoryContentStore",
    "RedisContentStore",
    "RemoteContentStore",
    "TieredContentCache",
    "is_cache_key",
    "redis_key",
]
