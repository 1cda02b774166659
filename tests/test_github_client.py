"""
Tests for the GitHub REST client.

Tests:
- Rate limiting
- Payload parsing
- Retry and error handling (against a fake session)
"""

import time

import aiohttp
import pytest

from follow_ranker.api import GitHubClient, RateLimiter
from follow_ranker.exceptions import MissingCredentialError, RemoteFetchError


class FakeResponse:
    def __init__(self, status=200, payload=None, headers=None, text=""):
        self.status = status
        self._payload = payload
        self.headers = headers or {}
        self._text = text

    async def json(self):
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


class FakeSession:
    """Replays queued responses (or exceptions) in order and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(*responses, max_retries=3):
    client = GitHubClient("test-token", base_url="https://api.test/", max_retries=max_retries, retry_backoff=0)
    client._session = FakeSession(*responses)
    return client


class TestRateLimiter:
    """Tests for RateLimiter class."""

    def test_initial_state(self):
        """Test rate limiter initial state."""
        limiter = RateLimiter(requests_per_hour=5000)

        assert limiter.remaining == 5000
        assert limiter.backoff_factor == 1.0
        assert limiter.seconds_until_reset() == 0.0

    def test_update_from_headers(self):
        """Test updating rate limit from response headers."""
        limiter = RateLimiter()
        reset = time.time() + 120

        limiter.update_from_headers({"X-RateLimit-Remaining": "42", "X-RateLimit-Reset": str(int(reset))})

        assert limiter.remaining == 42
        assert 100 < limiter.seconds_until_reset() <= 120

    def test_ignores_malformed_headers(self):
        """Test non-numeric headers leave the state unchanged."""
        limiter = RateLimiter()

        limiter.update_from_headers({"X-RateLimit-Remaining": "n/a", "X-RateLimit-Reset": "soon"})

        assert limiter.remaining == limiter.requests_per_hour
        assert limiter.reset_at is None

    def test_exhausted(self):
        """Test exhaustion at zero remaining."""
        limiter = RateLimiter()
        limiter.update_from_headers({"X-RateLimit-Remaining": "0"})

        assert limiter.is_exhausted

    def test_backoff_increase_and_cap(self):
        """Test exponential backoff doubles and is capped."""
        limiter = RateLimiter()

        limiter.increase_backoff()
        assert limiter.backoff_factor == 2.0

        for _ in range(20):
            limiter.increase_backoff()
        assert limiter.backoff_factor == 32

    def test_backoff_reset(self):
        """Test backoff halves on success but not below 1."""
        limiter = RateLimiter()
        limiter.increase_backoff()
        limiter.increase_backoff()

        limiter.reset_backoff()
        assert limiter.backoff_factor == 2.0
        limiter.reset_backoff()
        limiter.reset_backoff()
        assert limiter.backoff_factor == 1.0

    def test_backoff_delay(self):
        """Test delay grows with attempt number."""
        limiter = RateLimiter()

        assert limiter.backoff_delay(0, base=1.0) == 1.0
        assert limiter.backoff_delay(2, base=1.0) == 4.0
        assert limiter.backoff_delay(3, base=0) == 0


class TestParseLogins:
    """Tests for list payload parsing."""

    def test_extracts_logins(self):
        """Test logins are taken from user objects in order."""
        data = [{"login": "b", "id": 2}, {"login": "a", "id": 1}]

        assert GitHubClient._parse_logins(data, "/user/followers") == ["b", "a"]

    def test_empty_page(self):
        """Test an empty list parses to no logins."""
        assert GitHubClient._parse_logins([]) == []

    def test_rejects_non_list(self):
        """Test an object payload is an error."""
        with pytest.raises(RemoteFetchError, match="expected a list"):
            GitHubClient._parse_logins({"message": "Not Found"}, "/user/followers")

    def test_rejects_entry_without_login(self):
        """Test an entry missing its login is an error."""
        with pytest.raises(RemoteFetchError, match="Unexpected user entry"):
            GitHubClient._parse_logins([{"id": 1}])


class TestGitHubClient:
    """Tests for requests against a fake session."""

    def test_requires_token(self):
        """Test a missing token fails at construction."""
        with pytest.raises(MissingCredentialError, match="Missing GITHUB_TOKEN"):
            GitHubClient(None)
        with pytest.raises(MissingCredentialError):
            GitHubClient("")

    @pytest.mark.asyncio
    async def test_not_initialized(self):
        """Test calls outside the context manager are rejected."""
        client = GitHubClient("test-token")

        with pytest.raises(RuntimeError, match="Client not initialized"):
            await client.get_user("octocat")

    @pytest.mark.asyncio
    async def test_list_followers_page(self):
        """Test page parameters and URL for a follower page."""
        client = _client(FakeResponse(payload=[{"login": "a"}, {"login": "b"}]))

        logins = await client.list_followers(page=2, per_page=50)

        assert logins == ["a", "b"]
        assert client._session.requests == [
            ("https://api.test/user/followers", {"per_page": 50, "page": 2})
        ]

    @pytest.mark.asyncio
    async def test_per_page_clamped(self):
        """Test per_page is clamped to the API maximum."""
        client = _client(FakeResponse(payload=[]))

        await client.list_following(page=1, per_page=500)

        assert client._session.requests[0][1]["per_page"] == 100

    @pytest.mark.asyncio
    async def test_get_user(self):
        """Test profile lookups hit /users/{login}."""
        client = _client(FakeResponse(payload={"login": "octocat", "public_repos": 8}))

        user = await client.get_user("octocat")

        assert user["public_repos"] == 8
        assert client._session.requests[0][0] == "https://api.test/users/octocat"

    @pytest.mark.asyncio
    async def test_retries_server_error(self):
        """Test a 5xx is retried and the next success returned."""
        client = _client(
            FakeResponse(status=502, text="Bad Gateway"),
            FakeResponse(payload=[{"login": "a"}]),
        )

        assert await client.list_followers() == ["a"]
        assert len(client._session.requests) == 2

    @pytest.mark.asyncio
    async def test_retries_client_error(self):
        """Test connection errors are retried."""
        client = _client(
            aiohttp.ClientConnectionError("reset by peer"),
            FakeResponse(payload={"login": "octocat"}),
        )

        assert (await client.get_user("octocat"))["login"] == "octocat"

    @pytest.mark.asyncio
    async def test_not_found_fails_immediately(self):
        """Test a 404 is not retried."""
        client = _client(FakeResponse(status=404, text='{"message": "Not Found"}'))

        with pytest.raises(RemoteFetchError) as exc_info:
            await client.get_user("ghost")

        assert exc_info.value.status == 404
        assert exc_info.value.url == "https://api.test/users/ghost"
        assert len(client._session.requests) == 1

    @pytest.mark.asyncio
    async def test_retries_exhausted(self):
        """Test persistent 503s raise after max_retries attempts."""
        client = _client(*(FakeResponse(status=503) for _ in range(3)), max_retries=3)

        with pytest.raises(RemoteFetchError, match="503") as exc_info:
            await client.list_following()

        assert exc_info.value.status == 503
        assert len(client._session.requests) == 3

    @pytest.mark.asyncio
    async def test_unexpected_user_payload(self):
        """Test a non-object profile payload is an error."""
        client = _client(FakeResponse(payload=[1, 2]))

        with pytest.raises(RemoteFetchError, match="Unexpected payload"):
            await client.get_user("octocat")
