"""
Twitter Manager - 生命周期编排

职责:
- 按配置装配子系统（post / interaction 必选，search / space 可选）
- 非阻塞轮询会话就绪
- 就绪后按固定顺序启动子系统
- 按固定顺序停止子系统（未就绪时停止为空操作）

注意: 默认轮询没有次数和超时上限，会话一直不可用时会永远等待。
"""

import asyncio
import inspect
from enum import Enum
from typing import Any, Callable

import structlog

from ..config import TwitterSettings
from ..interfaces import (
    AgentRuntime,
    ReadinessProbe,
    ScraperFactory,
    SessionBackedClient,
    SpaceHandle,
    SubsystemHandle,
)
from ..session import ClientBase, SessionProbe
from ..subsystems import InteractionSubsystem, PostSubsystem, SearchSubsystem, SpaceSubsystem

logger = structlog.get_logger()

SEARCH_MODE_RISKS = (
    "violates consent of random users",
    "burns your rate limit",
    "can get your account banned",
)


class LifecycleState(str, Enum):
    UNSTARTED = "unstarted"
    AWAITING_SESSION = "awaiting_session"
    RUNNING = "running"
    STOPPED = "stopped"


class _ClientProbe(ReadinessProbe):
    def __init__(self, client: SessionBackedClient):
        self._client = client

    def is_ready(self) -> bool:
        return self._client.has_session()


class TwitterManager:
    """
    Orchestrates the base client and its subsystems.

    A manager is single-use: once stopped it cannot be started again.
    """

    def __init__(
        self,
        client: SessionBackedClient,
        post: SubsystemHandle,
        interaction: SubsystemHandle,
        search: SubsystemHandle | None = None,
        space: SpaceHandle | None = None,
        *,
        probe: ReadinessProbe | None = None,
        poll_interval: float = 1.0,
        max_polls: int | None = None,
        stop_space_on_shutdown: bool = False,
    ):
        self._state = LifecycleState.UNSTARTED

        self.client = client
        self.post = post
        self.search = search
        self.interaction = interaction
        self.space = space

        if probe is None:
            session = getattr(client, "session", None)
            probe = SessionProbe(session) if session is not None else _ClientProbe(client)
        self.probe = probe

        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.stop_space_on_shutdown = stop_space_on_shutdown

        self.polls = 0
        self._cascade_started = False
        self.last_error: str | None = None
        self._connect_task: asyncio.Task | None = None
        self._startup_task: asyncio.Task | None = None

        if search is not None:
            logger.warning(
                "twitter_manager.search_mode_risk",
                risks=list(SEARCH_MODE_RISKS),
                advice="use at your own risk",
            )

        self._state = LifecycleState.AWAITING_SESSION

    @classmethod
    def from_settings(
        cls,
        client: ClientBase,
        settings: TwitterSettings,
        *,
        max_polls: int | None = None,
    ) -> "TwitterManager":
        """Wire the concrete subsystems selected by the feature flags."""
        return cls(
            client,
            post=PostSubsystem(client),
            interaction=InteractionSubsystem(client),
            search=SearchSubsystem(client) if settings.search_enabled else None,
            space=SpaceSubsystem(client) if settings.spaces_enabled else None,
            poll_interval=settings.session_poll_interval,
            max_polls=max_polls,
            stop_space_on_shutdown=settings.stop_spaces_on_shutdown,
        )

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def subsystems(self) -> dict[str, SubsystemHandle]:
        """Present subsystems, keyed by name."""
        present = {"post": self.post, "search": self.search, "interaction": self.interaction, "space": self.space}
        return {name: sub for name, sub in present.items() if sub is not None}

    @property
    def startup_task(self) -> asyncio.Task | None:
        return self._startup_task

    def launch(self) -> asyncio.Task:
        """
        Begin session establishment and readiness polling in the background.

        Returns the polling task; callers are not expected to await it.
        """
        if self._startup_task is not None:
            return self._startup_task

        connect = getattr(self.client, "connect", None)
        if callable(connect):
            self._connect_task = asyncio.create_task(connect(), name="twitter.connect")
        self._startup_task = asyncio.create_task(self.run(), name="twitter.startup")
        return self._startup_task

    def cancel(self) -> None:
        """Abort pending readiness polling. A cascade already begun is left alone."""
        if self._cascade_started:
            return
        for task in (self._startup_task, self._connect_task):
            if task is not None and not task.done():
                task.cancel()

    async def run(self) -> bool:
        """Poll until the session is ready, then run the start cascade."""
        if not await self._wait_for_session():
            return False
        return await self._start_cascade()

    async def _wait_for_session(self) -> bool:
        while True:
            self.polls += 1
            if self.probe.is_ready():
                return True
            if self.max_polls is not None and self.polls >= self.max_polls:
                logger.warning("twitter_manager.session_poll_exhausted", polls=self.polls)
                return False
            await asyncio.sleep(self.poll_interval)

    def _cascade_steps(self) -> list[tuple[str, Callable[[], Any]]]:
        steps: list[tuple[str, Callable[[], Any]]] = [
            ("init", self.client.init),
            ("post", self.post.start),
        ]
        if self.search is not None:
            steps.append(("search", self.search.start))
        steps.append(("interaction", self.interaction.start))
        if self.space is not None:
            steps.append(("space", self.space.start_periodic_space_check))
        return steps

    async def _start_cascade(self) -> bool:
        self._cascade_started = True
        try:
            for name, step in self._cascade_steps():
                # stop() 可能在任一步骤挂起期间被调用
                if self._state is LifecycleState.STOPPED:
                    logger.info("twitter_manager.startup_aborted", reason="stopped", before=name)
                    await self._stop_subsystems()
                    return False
                result = step()
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            self.last_error = str(e)
            logger.error("twitter_manager.startup_failed", error=str(e), polls=self.polls)
            return False

        if self._state is not LifecycleState.AWAITING_SESSION:
            logger.info("twitter_manager.startup_aborted", reason="stopped", before=None)
            await self._stop_subsystems()
            return False

        self._state = LifecycleState.RUNNING
        logger.info("twitter_manager.running", subsystems=list(self.subsystems), polls=self.polls)
        return True

    async def _stop_subsystems(self) -> None:
        await self.post.stop()
        await self.interaction.stop()
        if self.search is not None:
            await self.search.stop()
        if self.stop_space_on_shutdown and self.space is not None:
            await self.space.stop()

    async def stop(self) -> None:
        """
        Stop cascade: post, interaction, then search.

        Space is left running unless ``stop_space_on_shutdown`` is set.
        Not guarded against repeated calls; subsystem stops are idempotent.
        STOPPED is terminal: a cascade still pending or in progress is
        abandoned at its next step and anything it started is stopped again.
        """
        if not self.probe.is_ready():
            logger.info("twitter_manager.stop_skipped", reason="still_starting_up")
            return

        self._state = LifecycleState.STOPPED
        await self._stop_subsystems()
        logger.info("twitter_manager.stopped")


def build_twitter_manager(
    runtime: AgentRuntime,
    settings: TwitterSettings,
    scraper_factory: ScraperFactory,
    *,
    max_polls: int | None = None,
) -> TwitterManager:
    """Build a manager around a fresh ClientBase. No I/O happens here."""
    client = ClientBase(runtime, settings, scraper_factory)
    return TwitterManager.from_settings(client, settings, max_polls=max_polls)
