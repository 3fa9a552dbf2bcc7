"""
Periodic subsystem base.

Every managed subsystem is a single asyncio task looping over ``tick``.
``start`` and ``stop`` are idempotent; ``stop`` before ``start`` is a no-op.
"""

import asyncio

import structlog

from ..session import ClientBase

logger = structlog.get_logger()


class PeriodicSubsystem:
    """Runs ``tick`` forever with ``next_delay`` seconds between iterations."""

    name = "subsystem"

    def __init__(self, client: ClientBase):
        self.client = client
        self.runtime = client.runtime
        self.settings = client.settings
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """启动循环（已运行则忽略）"""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"twitter.{self.name}")
        logger.info(f"{self.name}.started", username=self.client.username)

    async def stop(self):
        """停止循环（未启动则忽略）"""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"{self.name}.stopped", username=self.client.username)

    async def _loop(self):
        delay = self.initial_delay()
        while True:
            try:
                if delay > 0:
                    await asyncio.sleep(delay)
                await self.tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"{self.name}.tick_error", error=str(e))
            delay = self.next_delay()

    def initial_delay(self) -> float:
        return 0.0

    def next_delay(self) -> float:
        raise NotImplementedError

    async def tick(self):
        raise NotImplementedError

    def truncate(self, text: str) -> str:
        limit = self.settings.max_tweet_length
        if len(text) <= limit:
            return text
        return text[: limit - 1].rstrip() + "…"

    async def publish(self, text: str, in_reply_to: str | None = None) -> dict | None:
        """Send (or, in dry-run, only log) a tweet."""
        text = self.truncate(text)
        if self.settings.dry_run:
            logger.info(f"{self.name}.dry_run", text=text, in_reply_to=in_reply_to)
            return None
        scraper = self.client.require_session()
        return await scraper.send_tweet(text, in_reply_to=in_reply_to)
