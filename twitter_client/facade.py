"""
Twitter client entry point.

Hosts call:
- ``start(runtime)``  -> manager (returned before subsystems are running)
- ``validate(identity)`` -> bool, pre-flight credential check
- ``stop(runtime | manager)``
"""

import os
from typing import Any, Mapping

import structlog

from .config import TwitterIdentity, validate_twitter_config
from .errors import ConfigValidationError
from .interfaces import AgentRuntime, CacheManager, ScraperFactory
from .orchestrator import TwitterManager, build_twitter_manager
from .validator import CredentialValidator

logger = structlog.get_logger()

CLIENT_KIND = "twitter"


class TwitterClientInterface:
    """Facade bridging the host runtime and TwitterManager."""

    def __init__(
        self,
        scraper_factory: ScraperFactory,
        *,
        cache_manager: CacheManager | None = None,
        max_polls: int | None = None,
    ):
        self.scraper_factory = scraper_factory
        self.cache_manager = cache_manager
        # 仅供测试：限制就绪轮询次数，生产环境保持无限
        self.max_polls = max_polls

    async def start(self, runtime: AgentRuntime) -> TwitterManager | None:
        try:
            settings = validate_twitter_config(runtime)
        except ConfigValidationError as e:
            logger.error(
                "twitter_client.config_invalid",
                username=runtime.get_setting("TWITTER_USERNAME") or os.getenv("TWITTER_USERNAME"),
                email=runtime.get_setting("TWITTER_EMAIL") or os.getenv("TWITTER_EMAIL"),
                fields=e.fields,
            )
            return None

        logger.info("twitter_client.started", agent_id=runtime.agent_id, username=settings.username)

        manager = build_twitter_manager(
            runtime,
            settings,
            self.scraper_factory,
            max_polls=self.max_polls,
        )
        # 不等待子系统启动
        manager.launch()
        return manager

    async def validate(
        self,
        identity: TwitterIdentity | Mapping[str, Any],
        cache: CacheManager | None = None,
    ) -> bool:
        validator = CredentialValidator(
            self.scraper_factory,
            cache if cache is not None else self.cache_manager,
        )
        return await validator.validate(identity)

    async def stop(self, target: AgentRuntime | TwitterManager | None) -> None:
        if isinstance(target, TwitterManager):
            manager = target
        elif target is not None:
            logger.info(
                "twitter_client.stop",
                agent_name=target.character_name,
                agent_id=target.agent_id,
            )
            manager = target.clients.get(CLIENT_KIND)
        else:
            manager = None

        if manager is None:
            return
        await manager.stop()
