"""In-process counter store.

Only correct for single-instance deployments: a second server process keeps
its own counters, so limits can be bypassed by spreading requests. Also used
by tests, with an injectable clock.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

SWEEP_INTERVAL_SECONDS = 60


class InMemoryCounterStore:
    """Dict-backed counter store guarded by an asyncio.Lock (atomic per event loop).

    Keys expire like their Redis counterparts: a claim at its TTL, a window
    one window length after its newest member. Expired keys are swept on
    writes, at most once per sweep interval.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._claims: dict[str, float] = {}
        self._windows: dict[str, list[tuple[float, str]]] = {}
        self._window_expiry: dict[str, float] = {}
        self._sweep_interval = sweep_interval_seconds
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        for key in [k for k, expires_at in self._claims.items() if expires_at <= now]:
            del self._claims[key]
        for key in [k for k, expires_at in self._window_expiry.items() if expires_at <= now]:
            del self._window_expiry[key]
            self._windows.pop(key, None)

    def _drop_window(self, key: str) -> None:
        self._windows.pop(key, None)
        self._window_expiry.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def claim(self, key: str, ttl_seconds: int) -> bool:
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            expires_at = self._claims.get(key)
            if expires_at is not None and expires_at > now:
                return False
            self._claims[key] = now + ttl_seconds
            return True

    async def release(self, key: str) -> None:
        async with self._lock:
            self._claims.pop(key, None)

    async def add_within_limit(
        self, key: str, member: str, window_seconds: int, limit: int
    ) -> bool:
        async with self._lock:
            now = self._clock()
            self._sweep(now)
            cutoff = now - window_seconds
            entries = [e for e in self._windows.get(key, []) if e[0] > cutoff]
            if len(entries) >= limit:
                if entries:
                    self._windows[key] = entries
                else:
                    self._drop_window(key)
                return False
            entries.append((now, member))
            self._windows[key] = entries
            self._window_expiry[key] = now + window_seconds
            return True

    async def remove_member(self, key: str, member: str) -> None:
        async with self._lock:
            entries = self._windows.get(key)
            if not entries:
                return
            remaining = [e for e in entries if e[1] != member]
            if remaining:
                self._windows[key] = remaining
            else:
                self._drop_window(key)
