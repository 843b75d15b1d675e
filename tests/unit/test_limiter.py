"""Tests for rate limiter storage selection and client keying."""

from slowapi import Limiter
from starlette.requests import Request

from app.core import limiter as limiter_module
from app.core.config import Settings
from app.core.limiter import build_limiter, rate_limit_key, storage_uri


def _request(forwarded_for: str | None = None) -> Request:
    headers = [(b"x-forwarded-for", forwarded_for.encode())] if forwarded_for else []
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/v1/auth/login",
            "headers": headers,
            "client": ("10.0.0.5", 51000),
        }
    )


def test_redis_backend_shares_limits_through_redis() -> None:
    settings = Settings(
        counter_backend="redis",
        redis_host="cache",
        redis_port=6380,
        redis_db=2,
        redis_password="p@ss/word",
    )
    assert storage_uri(settings) == "redis://:p%40ss%2Fword@cache:6380/2"


def test_memory_backend_keeps_limits_in_process() -> None:
    assert storage_uri(Settings(counter_backend="memory")) == "memory://"


def test_build_limiter_respects_enabled_flag() -> None:
    limiter = build_limiter(Settings(counter_backend="memory", rate_limit_enabled=False))
    assert isinstance(limiter, Limiter)
    assert limiter.enabled is False


def test_key_ignores_forwarded_for_by_default(monkeypatch) -> None:
    monkeypatch.setattr(limiter_module, "get_settings", lambda: Settings(trust_forwarded_for=False))
    assert rate_limit_key(_request("203.0.113.9")) == "10.0.0.5"


def test_key_uses_first_forwarded_hop_behind_trusted_proxy(monkeypatch) -> None:
    monkeypatch.setattr(limiter_module, "get_settings", lambda: Settings(trust_forwarded_for=True))
    assert rate_limit_key(_request("203.0.113.9, 10.0.0.1")) == "203.0.113.9"
    assert rate_limit_key(_request()) == "10.0.0.5"
