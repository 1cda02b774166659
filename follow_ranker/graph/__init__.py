# Follow graph set algebra

from .set_algebra import (
    FollowerDiff,
    RelationPartition,
    follower_diff,
    mutuals,
    partition,
    sorted_identities,
    watchers,
    watching,
)

__all__ = [
    "FollowerDiff",
    "RelationPartition",
    "follower_diff",
    "mutuals",
    "partition",
    "sorted_identities",
    "watchers",
    "watching",
]
