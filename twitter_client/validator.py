"""
Credential validation - 凭证校验

一次性登录尝试；成功时缓存 cookies，后续建立会话可跳过重新登录。
"""

from typing import Any, Mapping

import structlog

from .cache import CACHE_NAMESPACE, cookie_cache_key
from .config import TwitterIdentity
from .interfaces import CacheManager, ScraperFactory

logger = structlog.get_logger()


class CredentialValidator:
    """Checks a login identity once; never raises."""

    def __init__(
        self,
        scraper_factory: ScraperFactory,
        cache: CacheManager | None = None,
        namespace: str = CACHE_NAMESPACE,
    ):
        self._scraper_factory = scraper_factory
        self._cache = cache
        self._namespace = namespace

    async def validate(self, identity: TwitterIdentity | Mapping[str, Any]) -> bool:
        """
        Try logging in with ``identity``.

        Returns:
            True iff the login succeeded. Errors are logged and reported as False.
        """
        username = None
        try:
            if isinstance(identity, Mapping):
                username = identity.get("username")
            else:
                username = getattr(identity, "username", None)

            if not isinstance(identity, TwitterIdentity):
                identity = TwitterIdentity.from_secrets(dict(identity))

            scraper = await self._scraper_factory(identity.username)
            await scraper.login(
                identity.username,
                identity.password,
                identity.email,
                identity.two_factor_secret,
            )
            success = await scraper.is_logged_in()
        except Exception as e:
            logger.error("credential_validator.login_error", username=username, error=str(e))
            return False

        if success:
            await self._cache_cookies(identity.username, scraper)
        else:
            logger.warning("credential_validator.login_rejected", username=identity.username)

        return success

    async def _cache_cookies(self, username: str, scraper: Any) -> None:
        if self._cache is None:
            return

        # 缓存失败不影响校验结果
        try:
            key = cookie_cache_key(username, self._namespace)
            await self._cache.set(key, await scraper.get_cookies())
            logger.info("credential_validator.cookies_cached", username=username, key=key)
        except Exception as e:
            logger.warning("credential_validator.cookie_cache_failed", username=username, error=str(e))
