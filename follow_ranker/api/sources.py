"""
Remote data source contracts.

The caches only depend on these protocols; GitHubClient satisfies both and
tests substitute in-memory fakes.
"""

from typing import Any, Protocol


class RelationSource(Protocol):
    """Paginated follower / following listings for the authenticated user."""

    async def list_followers(self, page: int = 1, per_page: int = 100) -> list[str]:
        ...

    async def list_following(self, page: int = 1, per_page: int = 100) -> list[str]:
        ...


class ProfileSource(Protocol):
    """Single-profile lookup by login."""

    async def get_user(self, login: str) -> dict[str, Any]:
        ...
