"""
Cache key management.

Centralized store and key names so the on-disk layout is documented in one
place.
"""

from follow_ranker.constants import (
    DEFAULT_RELATIONS_TTL_SECONDS,
    RELATIONS_CACHE_NAME,
    USER_CACHE_NAME,
)


class CacheKeys:
    """
    Centralized cache key definitions.

    Layout:
        - relationsCache.json -> {"relations": {"followers": ..., "followees": ...}}
        - userCache.json      -> {"<login>": {"login": ..., "public_repos": ...}}
    """

    # Store names (file stems)
    RELATIONS_STORE = RELATIONS_CACHE_NAME
    USER_STORE = USER_CACHE_NAME

    # Single-account assumption: one fixed key for the relations document
    RELATIONS = "relations"

    # TTLs (in seconds)
    TTL_RELATIONS = DEFAULT_RELATIONS_TTL_SECONDS

    @staticmethod
    def profile(identity: str) -> str:
        """Cache key for a user profile. Logins are case-sensitive and used verbatim."""
        return identity
