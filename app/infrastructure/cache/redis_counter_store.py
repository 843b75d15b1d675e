"""Redis-backed shared counter store for the quote anti-abuse gate.

Reachable from every server process, so limits hold under horizontal scaling.
Dedup windows use SET NX PX; the rolling daily cap runs as one Lua script so
trim, count and add happen atomically. Timestamps come from the Redis server
clock, not from the calling process.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from app.core.config import Settings
from app.domain.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)

_STORE_NAME = "counter_store"

# KEYS[1] window key; ARGV[1] window ms; ARGV[2] limit; ARGV[3] member
_ROLLING_WINDOW_ADD = """
local t = redis.call('TIME')
local now_ms = tonumber(t[1]) * 1000 + math.floor(tonumber(t[2]) / 1000)
local window_ms = tonumber(ARGV[1])
redis.call('ZREMRANGEBYSCORE', KEYS[1], '-inf', now_ms - window_ms)
if redis.call('ZCARD', KEYS[1]) >= tonumber(ARGV[2]) then
  return 0
end
redis.call('ZADD', KEYS[1], now_ms, ARGV[3])
redis.call('PEXPIRE', KEYS[1], window_ms)
return 1
"""


class RedisCounterStore:
    """Async Redis counter store. Fails closed: any Redis error raises StoreUnavailableException.

    Call connect() at startup and disconnect() at shutdown.
    """

    def __init__(self, settings: Settings, redis_client: redis.Redis | None = None) -> None:
        """Initialize store.

        Args:
            settings: Connection settings (host, port, db, password).
            redis_client: Optional Redis client for testing or DI.
        """
        self.settings = settings
        self.redis = redis_client
        self._rolling_add = None

    async def connect(self) -> None:
        """Create the Redis client and check reachability. Logs (does not raise) when down."""
        if self.redis is None:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value()
                if self.settings.redis_password
                else None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                socket_keepalive=True,
                max_connections=self.settings.redis_max_connections,
            )
        self._rolling_add = self.redis.register_script(_ROLLING_WINDOW_ADD)
        if await self.ping():
            logger.info(
                "Redis counter store connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        else:
            logger.warning(
                "Redis counter store unreachable at startup; quote submissions will be refused until it recovers"
            )

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._rolling_add = None
            logger.info("Redis counter store disconnected")

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise StoreUnavailableException(_STORE_NAME)
        return self.redis

    async def ping(self) -> bool:
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except redis.RedisError:
            return False

    async def claim(self, key: str, ttl_seconds: int) -> bool:
        """SET key NX PX ttl. Returns False when key already exists."""
        try:
            result = await self._client().set(key, "1", nx=True, px=ttl_seconds * 1000)
        except redis.RedisError as e:
            logger.error("Counter store claim failed for %s: %s", key, e)
            raise StoreUnavailableException(_STORE_NAME) from e
        return bool(result)

    async def release(self, key: str) -> None:
        try:
            await self._client().delete(key)
        except redis.RedisError as e:
            logger.error("Counter store release failed for %s: %s", key, e)
            raise StoreUnavailableException(_STORE_NAME) from e

    async def add_within_limit(
        self, key: str, member: str, window_seconds: int, limit: int
    ) -> bool:
        """Atomic trim + count + add on a sorted set (Lua). False at the ceiling."""
        client = self._client()
        if self._rolling_add is None:
            self._rolling_add = client.register_script(_ROLLING_WINDOW_ADD)
        try:
            result = await self._rolling_add(
                keys=[key], args=[window_seconds * 1000, limit, member]
            )
        except redis.RedisError as e:
            logger.error("Counter store window add failed for %s: %s", key, e)
            raise StoreUnavailableException(_STORE_NAME) from e
        return int(result) == 1

    async def remove_member(self, key: str, member: str) -> None:
        try:
            await self._client().zrem(key, member)
        except redis.RedisError as e:
            logger.error("Counter store window remove failed for %s: %s", key, e)
            raise StoreUnavailableException(_STORE_NAME) from e
