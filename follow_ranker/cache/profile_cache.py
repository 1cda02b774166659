"""
Permanent profile cache.

Profiles are cached forever: a stored record is returned without any
staleness check. Misses fetch from GitHub and overwrite the stored record
wholesale.
"""

import asyncio
from typing import Any

from pydantic import ValidationError

from follow_ranker.api.sources import ProfileSource
from follow_ranker.cache.cache_keys import CacheKeys
from follow_ranker.cache.store import JsonStore
from follow_ranker.exceptions import CacheCorruptError, RemoteFetchError
from follow_ranker.logging import get_logger
from follow_ranker.models import ProfileRecord

logger = get_logger("cache.profiles")


def _decode_profile(raw: Any) -> ProfileRecord:
    try:
        return ProfileRecord.model_validate(raw)
    except ValidationError as e:
        raise CacheCorruptError(CacheKeys.USER_STORE, str(e)) from e


class ProfileCacheStore:
    """
    Memoizing identity -> ProfileRecord store.

    Concurrent requests for the same identity share a single in-flight
    fetch. Failed fetches are not cached.
    """

    def __init__(self, store: JsonStore, source: ProfileSource):
        self._store = store
        self._source = source
        self._inflight: dict[str, asyncio.Future] = {}
        self.fetch_count = 0

    async def get_profile(self, identity: str) -> ProfileRecord:
        """
        Cached profile for `identity`, fetching it on a miss.

        Raises:
            RemoteFetchError: If the profile is not cached and the fetch fails
        """
        future = self._inflight.get(identity)
        if future is None:
            future = asyncio.ensure_future(
                self._store.get_or_compute(
                    CacheKeys.profile(identity),
                    lambda: self._fetch(identity),
                    decode=_decode_profile,
                )
            )
            self._inflight[identity] = future
            future.add_done_callback(lambda _: self._inflight.pop(identity, None))
        # Shield so one cancelled caller does not cancel the fetch for the others
        return await asyncio.shield(future)

    async def _fetch(self, identity: str) -> dict[str, Any]:
        logger.info("profile_cache_miss", identity=identity)
        self.fetch_count += 1
        payload = await self._source.get_user(identity)
        try:
            record = ProfileRecord.from_api(payload)
        except ValidationError as e:
            raise RemoteFetchError(f"Malformed profile payload for {identity}: {e}") from e
        return record.to_cache()

    async def cached_identities(self) -> list[str]:
        return await self._store.keys()
