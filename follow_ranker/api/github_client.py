"""
Async GitHub REST Client.

Features:
- Async HTTP with aiohttp
- Page-number pagination for follower / following lists
- Rate limiting from X-RateLimit-* headers with backoff
- Connection pooling and a concurrency cap
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import aiohttp

from follow_ranker.constants import (
    DEFAULT_PAGE_SIZE,
    FOLLOWERS_PATH,
    FOLLOWING_PATH,
    GITHUB_ACCEPT_HEADER,
    GITHUB_API_BASE,
    GITHUB_API_VERSION,
    MAX_PAGE_SIZE,
    RATE_LIMIT_LOW_WATERMARK,
    RATE_LIMIT_MAX_WAIT_SECONDS,
    RATE_LIMIT_REQUESTS_PER_HOUR,
    USER_AGENT,
    USER_PATH,
)
from follow_ranker.exceptions import MissingCredentialError, RemoteFetchError
from follow_ranker.logging import get_logger

logger = get_logger("github.client")

RETRYABLE_STATUSES = {403, 429, 500, 502, 503, 504}


class RateLimiter:
    """
    Rate limiter with exponential backoff.

    Tracks the GitHub REST rate limit from response headers and pauses
    before a request when the remaining allowance is nearly exhausted.
    """

    def __init__(
        self,
        requests_per_hour: int = RATE_LIMIT_REQUESTS_PER_HOUR,
        low_watermark: int = RATE_LIMIT_LOW_WATERMARK,
        max_wait: int = RATE_LIMIT_MAX_WAIT_SECONDS,
    ):
        self.requests_per_hour = requests_per_hour
        self.remaining = requests_per_hour
        self.reset_at: Optional[float] = None  # epoch seconds
        self.low_watermark = low_watermark
        self.max_wait = max_wait
        self.backoff_factor = 1.0

    def update_from_headers(self, headers: Any) -> None:
        """Update rate limit info from REST response headers."""
        remaining = headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            try:
                self.remaining = int(remaining)
            except ValueError:
                pass
        reset = headers.get("X-RateLimit-Reset")
        if reset is not None:
            try:
                self.reset_at = float(reset)
            except ValueError:
                pass

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    def seconds_until_reset(self, now: Optional[float] = None) -> float:
        if self.reset_at is None:
            return 0.0
        now = time.time() if now is None else now
        return max(0.0, self.reset_at - now)

    async def wait_if_needed(self) -> None:
        """Wait for the window to reset if approaching the rate limit."""
        if self.remaining >= self.low_watermark or self.reset_at is None:
            return
        wait_seconds = self.seconds_until_reset()
        if wait_seconds > 0:
            logger.warning(
                "rate_limit_wait", remaining=self.remaining, wait_seconds=round(wait_seconds)
            )
            await asyncio.sleep(min(wait_seconds + 1, self.max_wait))

    def backoff_delay(self, attempt: int, base: float = 1.0) -> float:
        return base * self.backoff_factor * (2 ** attempt)

    def increase_backoff(self) -> None:
        """Increase backoff factor on errors."""
        self.backoff_factor = min(self.backoff_factor * 2, 32)

    def reset_backoff(self) -> None:
        """Reset backoff on successful requests."""
        self.backoff_factor = max(self.backoff_factor / 2, 1.0)


class GitHubClient:
    """
    Async GitHub REST client for the authenticated user's follow graph.

    Example:
        async with GitHubClient(token) as client:
            logins = await client.list_followers(page=1, per_page=100)
            user = await client.get_user("octocat")
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: str = GITHUB_API_BASE,
        max_concurrent: int = 5,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
    ):
        if not token:
            raise MissingCredentialError("GITHUB_TOKEN")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.rate_limiter = RateLimiter()
        self._session: Optional[aiohttp.ClientSession] = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> "GitHubClient":
        """Create aiohttp session on context entry."""
        connector = aiohttp.TCPConnector(
            limit=self.max_concurrent * 2,
            limit_per_host=self.max_concurrent,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Accept": GITHUB_ACCEPT_HEADER,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": USER_AGENT,
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close session on context exit."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a REST resource with retries.

        Raises:
            RemoteFetchError: On a non-retryable status or once retries are exhausted
        """
        if not self._session:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        url = f"{self.base_url}{path}"
        last_error = "no attempts made"
        last_status: Optional[int] = None

        async with self._semaphore:
            for attempt in range(self.max_retries):
                await self.rate_limiter.wait_if_needed()
                try:
                    async with self._session.get(url, params=params) as response:
                        self.rate_limiter.update_from_headers(response.headers)
                        last_status = response.status

                        if response.status == 200:
                            self.rate_limiter.reset_backoff()
                            return await response.json()

                        text = await response.text()
                        last_error = f"GitHub API error {response.status}: {text[:200]}"

                        if response.status not in RETRYABLE_STATUSES:
                            logger.error("api_error", status=response.status, url=url)
                            raise RemoteFetchError(last_error, url=url, status=response.status)

                        if response.status in (403, 429) and self.rate_limiter.is_exhausted:
                            wait_seconds = min(
                                self.rate_limiter.seconds_until_reset() + 1,
                                self.rate_limiter.max_wait,
                            )
                            logger.warning("rate_limited", url=url, wait_seconds=round(wait_seconds))
                            await asyncio.sleep(wait_seconds)
                            continue

                        logger.warning(
                            "api_retry",
                            status=response.status,
                            url=url,
                            attempt=attempt + 1,
                            retries=self.max_retries,
                        )

                except asyncio.TimeoutError:
                    last_error = "request timed out"
                    last_status = None
                    logger.warning(
                        "request_timeout", url=url, attempt=attempt + 1, retries=self.max_retries
                    )

                except aiohttp.ClientError as e:
                    last_error = f"client error: {e}"
                    last_status = None
                    logger.warning("client_error", url=url, error=str(e), attempt=attempt + 1)

                self.rate_limiter.increase_backoff()
                if attempt + 1 < self.max_retries:
                    await asyncio.sleep(self.rate_limiter.backoff_delay(attempt, self.retry_backoff))

        logger.error("api_request_failed", url=url, status=last_status, error=last_error)
        raise RemoteFetchError(last_error, url=url, status=last_status)

    async def _list_logins(self, path: str, page: int, per_page: int) -> List[str]:
        per_page = max(1, min(per_page, MAX_PAGE_SIZE))
        data = await self._get_json(path, {"per_page": per_page, "page": page})
        return self._parse_logins(data, path)

    @staticmethod
    def _parse_logins(data: Any, path: str = "") -> List[str]:
        """Extract logins from a list-of-users payload."""
        if not isinstance(data, list):
            raise RemoteFetchError(f"Unexpected payload for {path}: expected a list", url=path)
        logins = []
        for user in data:
            login = user.get("login") if isinstance(user, dict) else None
            if not isinstance(login, str) or not login:
                raise RemoteFetchError(f"Unexpected user entry for {path}: {user!r}", url=path)
            logins.append(login)
        return logins

    async def list_followers(self, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> List[str]:
        """One page of logins following the authenticated user."""
        return await self._list_logins(FOLLOWERS_PATH, page, per_page)

    async def list_following(self, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> List[str]:
        """One page of logins the authenticated user follows."""
        return await self._list_logins(FOLLOWING_PATH, page, per_page)

    async def get_user(self, login: str) -> Dict[str, Any]:
        """Public profile for `login` (`login, public_repos, followers, following, html_url`, ...)."""
        data = await self._get_json(USER_PATH.format(login=login))
        if not isinstance(data, dict):
            raise RemoteFetchError(f"Unexpected payload for user {login}", url=USER_PATH.format(login=login))
        return data
