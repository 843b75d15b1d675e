"""Counter stores (Redis, in-memory) and key builders for the quote anti-abuse gate."""

from app.infrastructure.cache.keys import quote_daily_key, quote_dedup_key
from app.infrastructure.cache.memory_counter_store import InMemoryCounterStore
from app.infrastructure.cache.redis_counter_store import RedisCounterStore

__all__ = [
    "InMemoryCounterStore",
    "RedisCounterStore",
    "quote_daily_key",
    "quote_dedup_key",
]
