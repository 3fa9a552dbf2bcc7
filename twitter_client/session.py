"""
Session ownership - 会话持有

职责:
- SessionHolder: 唯一可写的会话句柄单元
- SessionProbe: 只读的就绪探测
- ClientBase: 基础子系统，建立会话、登录、加载资料
"""

from typing import Any

import structlog

from .cache import cache_key, cookie_cache_key
from .config import TwitterSettings
from .errors import AuthenticationFailure, SessionUnavailable
from .interfaces import AgentRuntime, ScraperClient, ScraperFactory

logger = structlog.get_logger()


class SessionHolder:
    """
    Mutable cell holding either nothing or the authenticated scraper.

    Only ClientBase writes to it. Teardown does not clear it.
    """

    def __init__(self):
        self._handle: ScraperClient | None = None

    @property
    def is_empty(self) -> bool:
        return self._handle is None

    def get(self) -> ScraperClient | None:
        return self._handle

    def set(self, handle: ScraperClient) -> None:
        self._handle = handle


class SessionProbe:
    """Side-effect free readiness check over a SessionHolder."""

    def __init__(self, holder: SessionHolder):
        self._holder = holder

    def is_ready(self) -> bool:
        return not self._holder.is_empty


class ClientBase:
    """
    Base subsystem shared by post / search / interaction / space.

    ``connect`` obtains the scraper handle (restoring cached cookies);
    ``init`` makes sure it is logged in and loads the agent profile.
    """

    def __init__(
        self,
        runtime: AgentRuntime,
        settings: TwitterSettings,
        scraper_factory: ScraperFactory,
    ):
        self.runtime = runtime
        self.settings = settings
        self._scraper_factory = scraper_factory
        self.session = SessionHolder()
        self.profile: dict[str, Any] | None = None

    @property
    def username(self) -> str:
        return self.settings.username

    @property
    def twitter_client(self) -> ScraperClient | None:
        return self.session.get()

    def has_session(self) -> bool:
        return not self.session.is_empty

    def require_session(self) -> ScraperClient:
        scraper = self.session.get()
        if scraper is None:
            raise SessionUnavailable(f"No Twitter session for {self.username}")
        return scraper

    async def cache_get(self, artifact: str) -> Any:
        cache = self.runtime.cache_manager
        if cache is None:
            return None
        return await cache.get(cache_key(self.username, artifact))

    async def cache_set(self, artifact: str, value: Any) -> None:
        cache = self.runtime.cache_manager
        if cache is not None:
            await cache.set(cache_key(self.username, artifact), value)

    async def connect(self) -> None:
        """Create the scraper handle. Failures leave the holder empty."""
        try:
            scraper = await self._scraper_factory(self.username)
            cookies = await self.cache_get("cookies")
            if cookies:
                await scraper.set_cookies(cookies)
                logger.info("client_base.cookies_restored", username=self.username)
        except Exception as e:
            logger.error("client_base.connect_failed", username=self.username, error=str(e))
            return

        self.session.set(scraper)
        logger.info("client_base.connected", username=self.username)

    async def init(self) -> None:
        """Log in if needed, then load and cache the agent profile."""
        scraper = self.require_session()

        if not await scraper.is_logged_in():
            await self._login(scraper)

        self.profile = await scraper.get_profile(self.username)
        await self.cache_set("profile", self.profile)
        logger.info("client_base.initialized", username=self.username)

    async def _login(self, scraper: ScraperClient) -> None:
        identity = self.settings.identity
        attempts = self.settings.retry_limit

        for attempt in range(1, attempts + 1):
            try:
                await scraper.login(
                    identity.username,
                    identity.password,
                    identity.email,
                    identity.two_factor_secret,
                )
                if await scraper.is_logged_in():
                    if self.runtime.cache_manager is not None:
                        await self.runtime.cache_manager.set(
                            cookie_cache_key(self.username),
                            await scraper.get_cookies(),
                        )
                    logger.info("client_base.logged_in", username=self.username, attempt=attempt)
                    return
            except Exception as e:
                logger.warning(
                    "client_base.login_attempt_failed",
                    username=self.username,
                    attempt=attempt,
                    error=str(e),
                )

        raise AuthenticationFailure(f"Login failed for {self.username} after {attempts} attempt(s)")
