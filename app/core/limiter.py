"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules (e.g. auth) can use
the same instance without circular imports. Central limit strings and decorators
keep rate limits DRY. These are per-IP limits on top of the quote gate's
per-identity counters.

With the redis counter backend the limit counters live in the same Redis, so
every instance draws from one bucket per client.
"""

from slowapi import Limiter
from starlette.requests import Request

from app.core.config import Settings, get_settings
from app.shared.request_audit import client_ip


def rate_limit_key(request: Request) -> str:
    """Client IP as seen through a trusted proxy (see TRUST_FORWARDED_FOR)."""
    return client_ip(request, get_settings().trust_forwarded_for) or "unknown"


def storage_uri(settings: Settings) -> str:
    if settings.counter_backend == "redis":
        return settings.redis_url
    return "memory://"


def build_limiter(settings: Settings) -> Limiter:
    # If Redis drops out, counting falls back to per-process memory rather than failing requests.
    return Limiter(
        key_func=rate_limit_key,
        storage_uri=storage_uri(settings),
        key_prefix="ratelimit",
        in_memory_fallback_enabled=True,
        enabled=settings.rate_limit_enabled,
    )


limiter = build_limiter(get_settings())

# Single source of truth for rate limit strings and decorators.
LOGIN_LIMIT = "10/minute"
TWO_FACTOR_LIMIT = "10/minute"
REFRESH_LIMIT = "30/minute"
QUOTE_SUBMIT_LIMIT = "5/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"

limit_auth = limiter.limit(LOGIN_LIMIT)
limit_two_factor = limiter.limit(TWO_FACTOR_LIMIT)
limit_refresh = limiter.limit(REFRESH_LIMIT)
limit_quote_submit = limiter.limit(QUOTE_SUBMIT_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
