"""
Pytest fixtures for Follow Ranker tests.

Remote sources are in-memory fakes; stores are MemoryStore or JsonFileStore
under tmp_path. Nothing touches the network or the real cache directory.
"""

import asyncio

import pytest

from follow_ranker.cache import CacheKeys, MemoryStore
from follow_ranker.config import get_settings
from follow_ranker.exceptions import RemoteFetchError
from follow_ranker.models import RelationSnapshot


def make_user(login, repos=0, followers=0, following=0):
    """GitHub `GET /users/{login}` payload with the fields the ranking reads."""
    return {
        "login": login,
        "public_repos": repos,
        "followers": followers,
        "following": following,
        "html_url": f"https://github.com/{login}",
        "type": "User",
    }


class FakeClock:
    """Settable epoch clock."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeRelationSource:
    """
    Page-based follower / following listings.

    fail_on: optional (collection, page) that raises RemoteFetchError,
    where collection is "followers" or "following".
    slow: optional collection whose pages each take `delay` seconds.
    """

    def __init__(self, followers=(), followees=(), fail_on=None, slow=None, delay=0.0):
        self.followers = list(followers)
        self.followees = list(followees)
        self.fail_on = fail_on
        self.slow = slow
        self.delay = delay
        self.calls = []
        self.completed = []

    async def _page(self, collection, items, page, per_page):
        self.calls.append((collection, page, per_page))
        await asyncio.sleep(self.delay if collection == self.slow else 0)
        if self.fail_on == (collection, page):
            raise RemoteFetchError(f"{collection} page {page} failed", status=502)
        self.completed.append((collection, page))
        start = (page - 1) * per_page
        return items[start:start + per_page]

    async def list_followers(self, page=1, per_page=100):
        return await self._page("followers", self.followers, page, per_page)

    async def list_following(self, page=1, per_page=100):
        return await self._page("following", self.followees, page, per_page)


class FakeProfileSource:
    """Profile lookups with optional failures, latency and concurrency tracking."""

    def __init__(self, users=(), failing=(), delay=0.0):
        self.users = {user["login"]: user for user in users}
        self.failing = set(failing)
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def get_user(self, login):
        self.calls.append(login)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if login in self.failing:
                raise RemoteFetchError(f"GitHub API error 502 for {login}", status=502)
            if login not in self.users:
                raise RemoteFetchError(f"GitHub API error 404 for {login}", status=404)
            return dict(self.users[login])
        finally:
            self.active -= 1


class FakeGitHubClient(FakeRelationSource, FakeProfileSource):
    """Both sources behind the client's async context manager interface."""

    def __init__(self, followers=(), followees=(), users=(), fail_on=None):
        FakeRelationSource.__init__(self, followers, followees, fail_on)
        FakeProfileSource.__init__(self, users)
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemoryStore("relationsCache")


@pytest.fixture
def relation_source_factory():
    return FakeRelationSource


@pytest.fixture
def profile_source_factory():
    return FakeProfileSource


@pytest.fixture
def github_client_factory():
    return FakeGitHubClient


@pytest.fixture
def seeded_relations():
    """Build a MemoryStore holding a relations document."""

    def _seed(last_update, followers=(), followees=()):
        snapshot = RelationSnapshot.build(last_update, followers, followees)
        return MemoryStore("relationsCache", {CacheKeys.RELATIONS: snapshot.to_cache()})

    return _seed


@pytest.fixture
def isolated_settings(monkeypatch, tmp_path):
    """Fresh settings pointing the cache at tmp_path, without a token."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("FOLLOW_RANKER_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield tmp_path / "cache"
    get_settings.cache_clear()
