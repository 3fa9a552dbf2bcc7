"""
Twitter Spaces periodic check.
"""

import asyncio

import structlog

from .base import PeriodicSubsystem

logger = structlog.get_logger()


class SpaceSubsystem(PeriodicSubsystem):
    """Launches a Space when the runtime proposes a title and none is live."""

    name = "space"

    def __init__(self, client):
        super().__init__(client)
        self.space_id: str | None = None

    def start_periodic_space_check(self) -> asyncio.Task | None:
        """Kick off the periodic check without waiting for it."""
        if self.running:
            return self._task
        self._task = asyncio.create_task(self._loop(), name="twitter.space")
        logger.info("space.periodic_check_started", interval=self.settings.spaces_check_interval)
        return self._task

    async def start(self):
        self.start_periodic_space_check()

    async def stop(self):
        await super().stop()
        if self.space_id is None:
            return
        space_id, self.space_id = self.space_id, None
        if self.settings.dry_run:
            return
        await self.client.require_session().end_space(space_id)
        logger.info("space.ended", space_id=space_id)

    def initial_delay(self) -> float:
        return 0.0

    def next_delay(self) -> float:
        return float(self.settings.spaces_check_interval)

    async def tick(self):
        if self.space_id is not None:
            return

        title = await self.runtime.compose("space_title", {"username": self.client.username})
        if not title:
            return

        if self.settings.dry_run:
            logger.info("space.dry_run", title=title)
            return

        self.space_id = await self.client.require_session().start_space(title)
        logger.info("space.launched", space_id=self.space_id, title=title)
