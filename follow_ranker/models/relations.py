"""
Relation snapshot models.

A snapshot is the follower / followee pair observed at one point in time.
It is persisted as two timestamped CacheEntry documents.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from follow_ranker.exceptions import CacheCorruptError

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the epoch time it was stored."""

    value: T
    timestamp: float


@dataclass(frozen=True)
class RelationSnapshot:
    """Followers and followees of the authenticated user at `last_update`."""

    last_update: float
    followers: frozenset[str] = field(default_factory=frozenset)
    followees: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls, last_update: float, followers: Iterable[str], followees: Iterable[str]
    ) -> "RelationSnapshot":
        return cls(
            last_update=last_update,
            followers=frozenset(followers),
            followees=frozenset(followees),
        )

    @property
    def updated_at(self) -> datetime:
        return datetime.fromtimestamp(self.last_update, tz=timezone.utc)

    def to_cache(self) -> dict[str, Any]:
        """
        Serialize into the persisted relations document.

        Identities are written sorted so that identical snapshots produce
        identical files.
        """
        return {
            "followers": {"value": sorted(self.followers), "timestamp": self.last_update},
            "followees": {"value": sorted(self.followees), "timestamp": self.last_update},
        }

    @classmethod
    def from_cache(cls, payload: Any, source: str = "relationsCache") -> "RelationSnapshot":
        """
        Decode the persisted relations document.

        Raises:
            CacheCorruptError: If the payload does not match the schema
        """
        followers = _decode_entry(payload, "followers", source)
        followees = _decode_entry(payload, "followees", source)
        # The older of the two entries decides staleness
        return cls.build(
            last_update=min(followers.timestamp, followees.timestamp),
            followers=followers.value,
            followees=followees.value,
        )


def _decode_entry(payload: Any, name: str, source: str) -> CacheEntry[list[str]]:
    if not isinstance(payload, dict):
        raise CacheCorruptError(source, "relations document is not an object")
    raw = payload.get(name)
    if not isinstance(raw, dict):
        raise CacheCorruptError(source, f"missing '{name}' entry")

    value = raw.get("value")
    timestamp = raw.get("timestamp")
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CacheCorruptError(source, f"'{name}.value' is not a list of logins")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise CacheCorruptError(source, f"'{name}.timestamp' is not a number")

    return CacheEntry(value=value, timestamp=float(timestamp))
