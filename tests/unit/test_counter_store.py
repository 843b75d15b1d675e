"""Tests for the counter store backends."""

import pytest
import redis.asyncio as redis

from app.core.config import Settings
from app.domain.exceptions import StoreUnavailableException
from app.infrastructure.cache import InMemoryCounterStore, RedisCounterStore
from tests.fakes import EpochClock


class TestInMemoryCounterStore:
    @pytest.fixture
    def epoch(self) -> EpochClock:
        return EpochClock()

    @pytest.fixture
    def store(self, epoch) -> InMemoryCounterStore:
        return InMemoryCounterStore(clock=epoch)

    async def test_claim_is_exclusive_until_ttl(self, store, epoch) -> None:
        assert await store.claim("k", 10) is True
        assert await store.claim("k", 10) is False
        epoch.advance(10)
        assert await store.claim("k", 10) is True

    async def test_release_frees_claim(self, store) -> None:
        await store.claim("k", 10)
        await store.release("k")
        assert await store.claim("k", 10) is True

    async def test_window_limit_and_roll(self, store, epoch) -> None:
        assert await store.add_within_limit("w", "a", 60, 2)
        epoch.advance(30)
        assert await store.add_within_limit("w", "b", 60, 2)
        assert not await store.add_within_limit("w", "c", 60, 2)
        epoch.advance(31)
        assert await store.add_within_limit("w", "c", 60, 2)

    async def test_remove_member_frees_slot(self, store) -> None:
        await store.add_within_limit("w", "a", 60, 1)
        await store.remove_member("w", "a")
        assert await store.add_within_limit("w", "b", 60, 1)

    async def test_expired_keys_are_swept(self, store, epoch) -> None:
        for i in range(1000):
            await store.claim(f"dedup:{i}", 600)
            await store.add_within_limit(f"daily:{i}", "m", 86400, 5)
        epoch.advance(10 * 86400)

        await store.claim("dedup:new", 600)

        assert list(store._claims) == ["dedup:new"]
        assert store._windows == {}
        assert store._window_expiry == {}

    async def test_sweep_keeps_live_keys(self, store, epoch) -> None:
        await store.claim("dedup", 600)
        await store.add_within_limit("daily", "m", 86400, 5)
        epoch.advance(120)

        await store.claim("other", 600)

        assert await store.claim("dedup", 600) is False
        assert not await store.add_within_limit("daily", "n", 86400, 1)

    async def test_emptied_window_is_dropped(self, store) -> None:
        await store.add_within_limit("w", "a", 60, 1)
        await store.remove_member("w", "a")
        assert "w" not in store._windows

    async def test_ping(self, store) -> None:
        assert await store.ping() is True


class _DownRedis:
    """Stand-in client whose every call fails like an unreachable server."""

    async def ping(self):
        raise redis.ConnectionError("connection refused")

    async def set(self, *args, **kwargs):
        raise redis.ConnectionError("connection refused")

    async def delete(self, *args):
        raise redis.ConnectionError("connection refused")

    async def zrem(self, *args):
        raise redis.ConnectionError("connection refused")

    def register_script(self, script):
        async def run(keys=None, args=None):
            raise redis.ConnectionError("connection refused")

        return run


class TestRedisCounterStoreUnavailable:
    @pytest.fixture
    def store(self) -> RedisCounterStore:
        return RedisCounterStore(Settings(), redis_client=_DownRedis())

    async def test_ping_reports_false(self, store) -> None:
        assert await store.ping() is False

    @pytest.mark.parametrize(
        ("method", "args"),
        [
            ("claim", ("k", 10)),
            ("release", ("k",)),
            ("add_within_limit", ("w", "m", 60, 5)),
            ("remove_member", ("w", "m")),
        ],
    )
    async def test_operations_raise_store_unavailable(self, store, method, args) -> None:
        with pytest.raises(StoreUnavailableException):
            await getattr(store, method)(*args)

    async def test_not_connected_raises(self) -> None:
        store = RedisCounterStore(Settings())
        assert await store.ping() is False
        with pytest.raises(StoreUnavailableException):
            await store.claim("k", 10)
