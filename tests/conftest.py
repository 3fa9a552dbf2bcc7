"""
Shared fakes for the Twitter client tests.
"""

from typing import Any

import pytest

from twitter_client.cache import InMemoryCacheManager
from twitter_client.config import setting_names

BASE_SETTINGS = {
    "TWITTER_USERNAME": "alice",
    "TWITTER_PASSWORD": "correct-horse",
    "TWITTER_EMAIL": "alice@example.com",
    "TWITTER_SESSION_POLL_INTERVAL": "0.01",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real TWITTER_* variables out of the tests."""
    for name in setting_names():
        monkeypatch.delenv(name, raising=False)


class FakeScraper:
    """In-memory stand-in for the Twitter scraper."""

    def __init__(self, username: str, password: str = "correct-horse"):
        self.username = username
        self._password = password
        self.logged_in = False
        self.login_calls = 0
        self.cookies_set: list[Any] | None = None
        self.sent: list[dict[str, Any]] = []
        self.search_results: list[dict[str, Any]] = []
        self.mentions: list[dict[str, Any]] = []
        self.user_tweets: dict[str, list[dict[str, Any]]] = {}
        self.ended_spaces: list[str] = []

    async def login(self, username, password, email=None, two_factor_secret=None):
        self.login_calls += 1
        self.logged_in = password == self._password

    async def is_logged_in(self):
        return self.logged_in

    async def get_cookies(self):
        return [{"name": "auth_token", "value": f"token-{self.username}"}]

    async def set_cookies(self, cookies):
        self.cookies_set = cookies
        self.logged_in = True

    async def get_profile(self, username):
        return {"username": username, "name": username.title()}

    async def send_tweet(self, text, in_reply_to=None):
        self.sent.append({"text": text, "in_reply_to": in_reply_to})
        return {"id": str(1000 + len(self.sent))}

    async def search_tweets(self, query, limit):
        return self.search_results[:limit]

    async def fetch_mentions(self, username, limit):
        return self.mentions[:limit]

    async def fetch_user_tweets(self, username, limit):
        return self.user_tweets.get(username, [])[:limit]

    async def start_space(self, title):
        return "space-1"

    async def end_space(self, space_id):
        self.ended_spaces.append(space_id)


class ScraperFactory:
    """Hands out FakeScrapers and remembers them."""

    def __init__(self, password: str = "correct-horse", error: Exception | None = None):
        self.password = password
        self.error = error
        self.created: list[FakeScraper] = []

    async def __call__(self, username: str) -> FakeScraper:
        if self.error is not None:
            raise self.error
        scraper = FakeScraper(username, self.password)
        self.created.append(scraper)
        return scraper


class FakeRuntime:
    def __init__(self, settings: dict[str, Any] | None = None, replies: dict[str, str] | None = None):
        self.agent_id = "agent-1"
        self.character_name = "Eliza"
        self.topics = ["python", "asyncio"]
        self.cache_manager = InMemoryCacheManager()
        self.clients: dict[str, Any] = {}
        self._settings = dict(BASE_SETTINGS if settings is None else settings)
        self._replies = replies or {}
        self.compose_calls: list[tuple[str, dict]] = []

    def get_setting(self, key: str) -> Any:
        return self._settings.get(key)

    async def compose(self, kind, context):
        self.compose_calls.append((kind, dict(context)))
        return self._replies.get(kind)


class FakeSubsystem:
    """Records effective start/stop in a shared event list."""

    def __init__(self, events: list[str], name: str):
        self._events = events
        self.name = name
        self.running = False
        self.stop_calls = 0

    async def start(self):
        if not self.running:
            self.running = True
            self._events.append(f"{self.name}.start")

    async def stop(self):
        self.stop_calls += 1
        if self.running:
            self.running = False
            self._events.append(f"{self.name}.stop")


class FakeSpace(FakeSubsystem):
    def start_periodic_space_check(self):
        if not self.running:
            self.running = True
            self._events.append(f"{self.name}.start")


class FakeClient:
    """Base client whose session appears after ``ready_after`` probes."""

    def __init__(self, events: list[str], ready_after: int = 1):
        self._events = events
        self._ready_after = ready_after
        self.checks = 0

    async def connect(self):
        self._events.append("client.connect")

    async def init(self):
        self._events.append("client.init")

    def has_session(self) -> bool:
        self.checks += 1
        self._events.append(f"probe.check#{self.checks}")
        return self.checks >= self._ready_after


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def scraper_factory() -> ScraperFactory:
    return ScraperFactory()
