"""RedisCounterStore against a live Redis: SET NX PX claims and the Lua rolling window.

Requires Redis at REDIS_HOST/REDIS_PORT. Run without it via: pytest -m 'not requires_redis'.
"""

import asyncio
from uuid import uuid4

import pytest

from app.core.config import get_settings
from app.infrastructure.cache import RedisCounterStore

pytestmark = pytest.mark.requires_redis

DAY = 24 * 60 * 60


@pytest.fixture
async def redis_store():
    """(store, key prefix). Keys under the prefix are deleted after the test."""
    store = RedisCounterStore(get_settings())
    await store.connect()
    if not await store.ping():
        await store.disconnect()
        pytest.skip("Redis not reachable at REDIS_HOST:REDIS_PORT")
    prefix = f"test:{uuid4().hex}:"
    yield store, prefix
    keys = [key async for key in store.redis.scan_iter(match=f"{prefix}*")]
    if keys:
        await store.redis.delete(*keys)
    await store.disconnect()


async def test_claim_is_exclusive_and_expires(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}dedup"

    assert await store.claim(key, 600) is True
    assert await store.claim(key, 600) is False
    assert 0 < await store.redis.pttl(key) <= 600_000

    await store.release(key)
    assert await store.claim(key, 600) is True


async def test_window_admits_up_to_limit(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}daily"

    results = [await store.add_within_limit(key, f"m{i}", DAY, 3) for i in range(4)]

    assert results == [True, True, True, False]
    assert await store.redis.zcard(key) == 3
    assert 0 < await store.redis.pttl(key) <= DAY * 1000


async def test_remove_member_frees_a_slot(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}daily"
    await store.add_within_limit(key, "a", DAY, 1)

    await store.remove_member(key, "a")

    assert await store.add_within_limit(key, "b", DAY, 1) is True


async def test_members_older_than_window_are_trimmed(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}daily"
    seconds, micros = await store.redis.time()
    now_ms = seconds * 1000 + micros // 1000
    await store.redis.zadd(key, {"old-1": now_ms - 2 * DAY * 1000, "old-2": now_ms - DAY * 1000 - 1})

    assert await store.add_within_limit(key, "new", DAY, 1) is True
    assert await store.redis.zrange(key, 0, -1) == ["new"]


async def test_concurrent_adds_at_cap_admit_exactly_limit(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}daily"

    results = await asyncio.gather(
        *(store.add_within_limit(key, f"m{i}", DAY, 5) for i in range(20))
    )

    assert results.count(True) == 5
    assert await store.redis.zcard(key) == 5


async def test_concurrent_claims_have_one_winner(redis_store) -> None:
    store, prefix = redis_store
    key = f"{prefix}dedup"

    results = await asyncio.gather(*(store.claim(key, 600) for _ in range(10)))

    assert results.count(True) == 1
