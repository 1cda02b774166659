"""
Set algebra over follower / followee identities.

Pure functions: no I/O, no mutation of inputs. Results are frozensets, so
the outcome never depends on input iteration order.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RelationPartition:
    """Followees and followers split by whether the relation is reciprocated."""

    mutuals: frozenset[str] = field(default_factory=frozenset)
    watching: frozenset[str] = field(default_factory=frozenset)
    watchers: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class FollowerDiff:
    """Followers gained and lost between two snapshots."""

    gained: frozenset[str] = field(default_factory=frozenset)
    lost: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.gained and not self.lost


def mutuals(followers: Iterable[str], followees: Iterable[str]) -> frozenset[str]:
    """Accounts I follow that follow me back."""
    return frozenset(followees) & frozenset(followers)


def watching(followers: Iterable[str], followees: Iterable[str]) -> frozenset[str]:
    """Accounts I follow that do not follow back."""
    return frozenset(followees) - frozenset(followers)


def watchers(followers: Iterable[str], followees: Iterable[str]) -> frozenset[str]:
    """Accounts following me that I do not follow."""
    return frozenset(followers) - frozenset(followees)


def partition(followers: Iterable[str], followees: Iterable[str]) -> RelationPartition:
    followers_set = frozenset(followers)
    followees_set = frozenset(followees)
    return RelationPartition(
        mutuals=followees_set & followers_set,
        watching=followees_set - followers_set,
        watchers=followers_set - followees_set,
    )


def follower_diff(previous: Iterable[str], current: Iterable[str]) -> FollowerDiff:
    previous_set = frozenset(previous)
    current_set = frozenset(current)
    return FollowerDiff(gained=current_set - previous_set, lost=previous_set - current_set)


def sorted_identities(identities: Iterable[str]) -> list[str]:
    """Deterministic ordering for display and serialization."""
    return sorted(identities)
