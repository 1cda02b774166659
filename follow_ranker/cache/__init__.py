"""
Local Caching Layer.

Provides the two-tier cache in front of the GitHub API:
- RelationCacheStore: follower / followee snapshot with TTL invalidation
- ProfileCacheStore: permanent identity -> profile memo
- JsonFileStore / MemoryStore: the durable (or in-memory) documents both sit on

Usage:
    from follow_ranker.cache import JsonFileStore, RelationCacheStore

    store = JsonFileStore(settings.relations_cache_path)
    relations = RelationCacheStore(store, client, ttl_seconds=3600)
    snapshot = await relations.get_snapshot()
"""

from follow_ranker.cache.cache_keys import CacheKeys
from follow_ranker.cache.profile_cache import ProfileCacheStore
from follow_ranker.cache.relation_cache import RelationCacheStore, read_snapshot
from follow_ranker.cache.store import CacheLookup, JsonFileStore, JsonStore, MemoryStore

__all__ = [
    "CacheKeys",
    "CacheLookup",
    "JsonFileStore",
    "JsonStore",
    "MemoryStore",
    "ProfileCacheStore",
    "RelationCacheStore",
    "read_snapshot",
]
