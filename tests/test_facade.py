"""
TwitterClientInterface 集成测试

使用真实的 ClientBase / 子系统，仅替换 scraper 与 runtime。
"""

import asyncio

import pytest
from structlog.testing import capture_logs

from conftest import BASE_SETTINGS, FakeRuntime, ScraperFactory
from twitter_client.cache import InMemoryCacheManager
from twitter_client.facade import TwitterClientInterface
from twitter_client.orchestrator import LifecycleState
from twitter_client.subsystems import SearchSubsystem, SpaceSubsystem


class TestStart:

    @pytest.mark.asyncio
    async def test_invalid_config_returns_none(self):
        runtime = FakeRuntime({"TWITTER_USERNAME": "alice", "TWITTER_EMAIL": "alice@example.com"})
        facade = TwitterClientInterface(ScraperFactory())

        with capture_logs() as logs:
            manager = await facade.start(runtime)

        assert manager is None
        failure = next(log for log in logs if log["event"] == "twitter_client.config_invalid")
        assert failure["log_level"] == "error"
        assert failure["username"] == "alice"
        assert failure["email"] == "alice@example.com"
        assert "password" not in failure

    @pytest.mark.asyncio
    async def test_start_returns_immediately_then_runs(self):
        runtime = FakeRuntime({**BASE_SETTINGS, "TWITTER_SEARCH_ENABLE": "true"})
        facade = TwitterClientInterface(ScraperFactory())

        manager = await facade.start(runtime)

        assert manager.state == LifecycleState.AWAITING_SESSION
        assert isinstance(manager.search, SearchSubsystem)
        assert manager.space is None

        assert await manager.startup_task is True
        assert manager.state == LifecycleState.RUNNING
        assert manager.post.running and manager.interaction.running and manager.search.running
        assert manager.client.profile["username"] == "alice"

        await facade.stop(manager)
        assert manager.state == LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_spaces_flag_wires_space(self):
        runtime = FakeRuntime({**BASE_SETTINGS, "TWITTER_SPACES_ENABLE": "true"})
        facade = TwitterClientInterface(ScraperFactory(), max_polls=50)

        manager = await facade.start(runtime)
        await manager.startup_task

        assert isinstance(manager.space, SpaceSubsystem)
        assert manager.space.running is True

        await facade.stop(manager)
        # 默认不停止 space
        assert manager.space.running is True
        await manager.space.stop()

    @pytest.mark.asyncio
    async def test_unreachable_session_keeps_polling(self):
        facade = TwitterClientInterface(ScraperFactory(error=OSError("offline")), max_polls=5)

        manager = await facade.start(FakeRuntime())

        assert await manager.startup_task is False
        assert manager.polls == 5
        assert manager.state == LifecycleState.AWAITING_SESSION


class TestStop:

    @pytest.mark.asyncio
    async def test_stop_via_runtime_registry(self):
        runtime = FakeRuntime()
        facade = TwitterClientInterface(ScraperFactory())
        manager = await facade.start(runtime)
        await manager.startup_task
        runtime.clients["twitter"] = manager

        with capture_logs() as logs:
            await facade.stop(runtime)

        notice = next(log for log in logs if log["event"] == "twitter_client.stop")
        assert notice["agent_name"] == "Eliza"
        assert notice["agent_id"] == "agent-1"
        assert manager.post.running is False
        assert manager.interaction.running is False

    @pytest.mark.asyncio
    async def test_stop_without_registered_manager_is_noop(self):
        facade = TwitterClientInterface(ScraperFactory())

        await facade.stop(FakeRuntime())
        await facade.stop(None)

    @pytest.mark.asyncio
    async def test_stop_while_starting_is_ignored(self):
        facade = TwitterClientInterface(ScraperFactory())
        manager = await facade.start(FakeRuntime())

        # launch 已调度，但 connect 尚未执行
        await facade.stop(manager)

        assert manager.state == LifecycleState.AWAITING_SESSION
        assert await manager.startup_task is True
        assert manager.state == LifecycleState.RUNNING
        await manager.stop()


class TestValidate:

    @pytest.mark.asyncio
    async def test_validate_uses_explicit_cache(self):
        cache = InMemoryCacheManager()
        facade = TwitterClientInterface(ScraperFactory())

        ok = await facade.validate(
            {"username": "alice", "password": "correct-horse", "email": "alice@example.com"},
            cache=cache,
        )

        assert ok is True
        assert "twitter/alice/cookies" in cache.store

    @pytest.mark.asyncio
    async def test_validate_falls_back_to_facade_cache(self):
        cache = InMemoryCacheManager()
        facade = TwitterClientInterface(ScraperFactory(), cache_manager=cache)

        ok = await facade.validate({"username": "alice", "password": "nope", "email": "alice@example.com"})

        assert ok is False
        assert cache.store == {}


class SlowScraperFactory(ScraperFactory):
    """Session appears only after a short delay."""

    async def __call__(self, username):
        await asyncio.sleep(0.005)
        return await super().__call__(username)


class SizedCache(InMemoryCacheManager):
    """A host cache that is falsy while empty."""

    def __len__(self):
        return len(self.store)


class TestStopRace:

    @pytest.mark.asyncio
    async def test_stop_after_connect_before_cascade_stays_stopped(self):
        runtime = FakeRuntime({**BASE_SETTINGS, "TWITTER_SESSION_POLL_INTERVAL": "0.05"})
        facade = TwitterClientInterface(SlowScraperFactory())
        manager = await facade.start(runtime)

        await asyncio.sleep(0.02)
        await facade.stop(manager)

        assert manager.state == LifecycleState.STOPPED
        assert await manager.startup_task is False
        assert manager.state == LifecycleState.STOPPED
        assert manager.post.running is False
        assert manager.interaction.running is False


class TestValidateCacheSelection:

    @pytest.mark.asyncio
    async def test_empty_explicit_cache_is_not_skipped(self):
        explicit = SizedCache()
        fallback = InMemoryCacheManager()
        facade = TwitterClientInterface(ScraperFactory(), cache_manager=fallback)

        ok = await facade.validate(
            {"username": "alice", "password": "correct-horse", "email": "alice@example.com"},
            cache=explicit,
        )

        assert ok is True
        assert "twitter/alice/cookies" in explicit.store
        assert fallback.store == {}
