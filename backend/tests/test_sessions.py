"""
Tests for the Search Session Store

Tests cover:
- In-memory set/get/overwrite
- Lazy expiry via sweep() at the 10 minute boundary
- Sweep across all phones
- Redis backend serialization, TTL and degradation
"""

import json

import pytest
from unittest.mock import AsyncMock

from smsjobs.config import Settings
from smsjobs.services.sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SESSION_TTL_SECONDS,
    build_session_store,
)
from tests.conftest import FakeClock, make_job


class TestInMemorySessionStore:

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, sessions):
        assert await sessions.get("+15550001111") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, sessions, clock):
        jobs = [make_job("1"), make_job("2")]
        await sessions.set("+15550001111", jobs)

        session = await sessions.get("+15550001111")
        assert session.jobs == jobs
        assert session.timestamp == clock.now

    @pytest.mark.asyncio
    async def test_set_overwrites_without_merge(self, sessions):
        await sessions.set("+15550001111", [make_job("1"), make_job("2")])
        await sessions.set("+15550001111", [make_job("3")])

        session = await sessions.get("+15550001111")
        assert [job.id for job in session.jobs] == ["3"]

    @pytest.mark.asyncio
    async def test_get_does_not_delete(self, sessions):
        await sessions.set("+15550001111", [make_job()])
        await sessions.get("+15550001111")
        assert await sessions.get("+15550001111") is not None

    @pytest.mark.asyncio
    async def test_session_survives_nine_minutes(self, sessions, clock):
        await sessions.set("+15550001111", [make_job()])
        clock.advance(9 * 60)

        assert await sessions.sweep() == 0
        assert await sessions.get("+15550001111") is not None

    @pytest.mark.asyncio
    async def test_session_swept_after_eleven_minutes(self, sessions, clock):
        await sessions.set("+15550001111", [make_job()])
        clock.advance(11 * 60)

        assert await sessions.sweep() == 1
        assert await sessions.get("+15550001111") is None

    @pytest.mark.asyncio
    async def test_expired_session_readable_until_swept(self, sessions, clock):
        """Expiry is lazy: only sweep() removes entries."""
        await sessions.set("+15550001111", [make_job()])
        clock.advance(11 * 60)
        assert await sessions.get("+15550001111") is not None

    @pytest.mark.asyncio
    async def test_exactly_ttl_is_kept(self, sessions, clock):
        await sessions.set("+15550001111", [make_job()])
        clock.advance(SESSION_TTL_SECONDS)
        assert await sessions.sweep() == 0

    @pytest.mark.asyncio
    async def test_sweep_covers_all_phones(self, sessions, clock):
        await sessions.set("+15550000001", [make_job()])
        clock.advance(6 * 60)
        await sessions.set("+15550000002", [make_job()])
        clock.advance(6 * 60)

        assert await sessions.sweep() == 1
        assert await sessions.get("+15550000001") is None
        assert await sessions.get("+15550000002") is not None
        assert len(sessions) == 1


@pytest.fixture
def mock_redis():
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


@pytest.fixture
def redis_store(mock_redis):
    store = RedisSessionStore(redis_url="redis://localhost:6379", clock=FakeClock(1000.0))
    store.redis = mock_redis
    return store


class TestRedisSessionStore:

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, redis_store, mock_redis):
        await redis_store.set("+15550001111", [make_job()])

        mock_redis.setex.assert_called_once()
        key, ttl, payload = mock_redis.setex.call_args[0]
        assert key == "sms_session:+15550001111"
        assert ttl == 600
        data = json.loads(payload)
        assert data["timestamp"] == 1000.0
        assert data["jobs"][0]["title"] == "Fence Repair"

    @pytest.mark.asyncio
    async def test_get_round_trips_jobs(self, redis_store, mock_redis):
        job = make_job(urgency="emergency")
        mock_redis.get.return_value = json.dumps(
            {"jobs": [job.model_dump()], "timestamp": 1000.0}
        )

        session = await redis_store.get("+15550001111")
        assert session.jobs == [job]
        assert session.timestamp == 1000.0

    @pytest.mark.asyncio
    async def test_get_miss(self, redis_store):
        assert await redis_store.get("+15550001111") is None

    @pytest.mark.asyncio
    async def test_get_degrades_on_redis_error(self, redis_store, mock_redis):
        mock_redis.get.side_effect = ConnectionError("redis down")
        assert await redis_store.get("+15550001111") is None

    @pytest.mark.asyncio
    async def test_set_degrades_on_redis_error(self, redis_store, mock_redis):
        mock_redis.setex.side_effect = ConnectionError("redis down")
        await redis_store.set("+15550001111", [make_job()])

    @pytest.mark.asyncio
    async def test_sweep_is_noop(self, redis_store):
        assert await redis_store.sweep() == 0

    @pytest.mark.asyncio
    async def test_close(self, redis_store, mock_redis):
        await redis_store.close()
        mock_redis.aclose.assert_called_once()
        assert redis_store.redis is None


class TestBuildSessionStore:

    def test_memory_backend(self):
        store = build_session_store(Settings(session_backend="memory", _env_file=None))
        assert isinstance(store, InMemorySessionStore)

    def test_redis_backend(self):
        store = build_session_store(Settings(session_backend="redis", _env_file=None))
        assert isinstance(store, RedisSessionStore)
