# GitHub API integration module

from .github_client import GitHubClient, RateLimiter
from .sources import ProfileSource, RelationSource

__all__ = [
    "GitHubClient",
    "RateLimiter",
    "ProfileSource",
    "RelationSource",
]
