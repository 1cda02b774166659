"""
Relation cache with time-based invalidation.

Serves the follower / followee snapshot from the relations store while it is
fresh, and replaces it wholesale from GitHub once it is older than the TTL.
A refresh either commits a complete snapshot or leaves the store untouched.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Optional

from follow_ranker.api.sources import RelationSource
from follow_ranker.cache.cache_keys import CacheKeys
from follow_ranker.cache.store import JsonStore
from follow_ranker.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from follow_ranker.exceptions import CacheCorruptError
from follow_ranker.graph import FollowerDiff, follower_diff
from follow_ranker.logging import get_logger, log_timing
from follow_ranker.models import RelationSnapshot

logger = get_logger("cache.relations")

PageFetcher = Callable[..., Awaitable[list[str]]]


class RelationCacheStore:
    """
    Get-or-refresh access to the authenticated user's relation snapshot.

    Usage:
        relations = RelationCacheStore(store, client, ttl_seconds=3600)
        snapshot = await relations.get_snapshot()
        if relations.last_diff:
            print(relations.last_diff.gained)
    """

    def __init__(
        self,
        store: JsonStore,
        source: RelationSource,
        ttl_seconds: float = CacheKeys.TTL_RELATIONS,
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        if page_size > MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be at most {MAX_PAGE_SIZE}, got {page_size}")
        self._store = store
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._page_size = page_size
        self._clock = clock
        self.last_diff: Optional[FollowerDiff] = None

    async def get_snapshot(self, force_refresh: bool = False) -> RelationSnapshot:
        """
        Return the cached snapshot, refreshing it when missing, expired or forced.

        Raises:
            RemoteFetchError: If the refresh fails. The stored snapshot is left
                unchanged and is not returned.
        """
        self.last_diff = None
        cached = await self.load()
        now = self._clock()

        if cached is not None and not force_refresh and not self.is_stale(cached, now):
            logger.debug(
                "relations_cache_hit",
                age_seconds=round(now - cached.last_update, 1),
                followers=len(cached.followers),
                followees=len(cached.followees),
            )
            return cached

        if force_refresh:
            reason = "forced"
        elif cached is None:
            reason = "missing"
        else:
            reason = "expired"
        return await self._refresh(cached, reason)

    async def load(self) -> Optional[RelationSnapshot]:
        """Persisted snapshot, or None when absent or unreadable."""
        return await read_snapshot(self._store)

    def is_stale(self, snapshot: RelationSnapshot, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return now - snapshot.last_update > self._ttl_seconds

    async def invalidate(self) -> bool:
        """Drop the persisted snapshot so the next read refreshes."""
        removed = await self._store.delete(CacheKeys.RELATIONS)
        if removed:
            logger.info("relations_cache_invalidated")
        return removed

    @log_timing("relations_refresh")
    async def _refresh(
        self, previous: Optional[RelationSnapshot], reason: str
    ) -> RelationSnapshot:
        logger.info("relations_refresh_started", reason=reason)
        followers, followees = await self._fetch_all()

        now = self._clock()
        if previous is not None:
            now = max(now, previous.last_update)
        snapshot = RelationSnapshot.build(now, followers, followees)

        if previous is not None:
            diff = follower_diff(previous.followers, snapshot.followers)
            self.last_diff = diff
            if not diff.is_empty:
                logger.info(
                    "followers_changed",
                    gained=sorted(diff.gained),
                    lost=sorted(diff.lost),
                )

        await self._store.set(CacheKeys.RELATIONS, snapshot.to_cache())
        logger.info(
            "relations_refreshed",
            followers=len(snapshot.followers),
            followees=len(snapshot.followees),
        )
        return snapshot

    async def _fetch_all(self) -> tuple[list[str], list[str]]:
        """Paginate both collections concurrently; cancel the other on failure."""
        followers_task = asyncio.ensure_future(
            self._paginate(self._source.list_followers, "followers")
        )
        followees_task = asyncio.ensure_future(
            self._paginate(self._source.list_following, "followees")
        )
        tasks = (followers_task, followees_task)
        try:
            followers, followees = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return followers, followees

    async def _paginate(self, fetch_page: PageFetcher, collection: str) -> list[str]:
        """
        Fetch pages in order until a short or empty page.

        Pages are sequential: the page number is the continuation cursor.
        """
        identities: list[str] = []
        page = 1
        while True:
            batch = await fetch_page(page=page, per_page=self._page_size)
            identities.extend(batch)
            if len(batch) < self._page_size:
                break
            page += 1

        logger.debug("relations_paginated", collection=collection, pages=page, count=len(identities))
        return identities


async def read_snapshot(store: JsonStore) -> Optional[RelationSnapshot]:
    """Decode the persisted relations document; absent or corrupt reads as None."""
    lookup = await store.get(CacheKeys.RELATIONS)
    if not lookup.is_hit:
        return None
    try:
        return RelationSnapshot.from_cache(lookup.value, source=store.name)
    except CacheCorruptError as e:
        logger.warning("cache_corrupt", store=store.name, error=e.reason)
        return None
