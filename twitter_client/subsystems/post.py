"""
Autonomous posting loop.
"""

import random

import structlog

from .base import PeriodicSubsystem

logger = structlog.get_logger()


class PostSubsystem(PeriodicSubsystem):
    name = "post"

    def initial_delay(self) -> float:
        if self.settings.post_immediately:
            return 0.0
        return self.next_delay()

    def next_delay(self) -> float:
        minutes = random.randint(self.settings.post_interval_min, self.settings.post_interval_max)
        return minutes * 60.0

    async def tick(self):
        text = await self.runtime.compose(
            "post",
            {"username": self.client.username, "profile": self.client.profile},
        )
        if not text:
            logger.info("post.skipped", reason="empty_content")
            return

        result = await self.publish(text)
        logger.info("post.published", dry_run=self.settings.dry_run, tweet_id=(result or {}).get("id"))
