"""
Collaborator contracts.

The scraper, the cache and the host runtime live outside this package;
these protocols describe the slice of them the client relies on.
"""

from typing import Any, Awaitable, Callable, Mapping, Protocol


class ScraperClient(Protocol):
    """Authenticated (or not yet authenticated) connection to Twitter/X."""

    async def login(
        self,
        username: str,
        password: str,
        email: str | None = None,
        two_factor_secret: str | None = None,
    ) -> None: ...

    async def is_logged_in(self) -> bool: ...

    async def get_cookies(self) -> list[Any]: ...

    async def set_cookies(self, cookies: list[Any]) -> None: ...

    async def get_profile(self, username: str) -> dict[str, Any]: ...

    async def send_tweet(self, text: str, in_reply_to: str | None = None) -> dict[str, Any]: ...

    async def search_tweets(self, query: str, limit: int) -> list[dict[str, Any]]: ...

    async def fetch_mentions(self, username: str, limit: int) -> list[dict[str, Any]]: ...

    async def fetch_user_tweets(self, username: str, limit: int) -> list[dict[str, Any]]: ...

    async def start_space(self, title: str) -> str: ...

    async def end_space(self, space_id: str) -> None: ...


ScraperFactory = Callable[[str], Awaitable[ScraperClient]]


class CacheManager(Protocol):
    """Key-value store shared by the agent's clients."""

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class AgentRuntime(Protocol):
    """Host runtime the client is started for."""

    agent_id: str
    character_name: str
    topics: list[str]
    cache_manager: CacheManager | None
    clients: Mapping[str, Any]

    def get_setting(self, key: str) -> Any: ...

    async def compose(self, kind: str, context: Mapping[str, Any]) -> str | None:
        """Generate text for ``kind`` (post / reply / space_title), or None to skip."""


class SubsystemHandle(Protocol):
    """Uniform start/stop capability of each managed subsystem."""

    async def start(self) -> Any: ...

    async def stop(self) -> Any: ...


class SpaceHandle(SubsystemHandle, Protocol):
    def start_periodic_space_check(self) -> Any: ...


class ReadinessProbe(Protocol):
    """Read-only check that the session handle exists."""

    def is_ready(self) -> bool: ...


class SessionBackedClient(Protocol):
    """Base subsystem: owns the session handle the others depend on."""

    async def connect(self) -> Any: ...

    async def init(self) -> Any: ...

    def has_session(self) -> bool: ...
