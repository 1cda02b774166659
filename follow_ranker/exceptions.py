"""
Follow Ranker exception hierarchy.

Remote failures and credential problems propagate to the caller; cache
corruption never leaves the store layer.
"""


class FollowRankerError(Exception):
    """Base class for all Follow Ranker errors."""

    pass


class MissingCredentialError(FollowRankerError):
    """Raised when the GitHub token is not configured."""

    def __init__(self, variable: str = "GITHUB_TOKEN"):
        self.variable = variable
        super().__init__(f"Missing {variable}")


class RemoteFetchError(FollowRankerError):
    """Raised when a GitHub API call fails (network error, non-2xx, rate limit)."""

    def __init__(self, message: str, url: str | None = None, status: int | None = None):
        self.url = url
        self.status = status
        super().__init__(message)


class CacheCorruptError(FollowRankerError):
    """Raised when a stored cache payload cannot be decoded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Corrupt cache payload in {source}: {reason}")
