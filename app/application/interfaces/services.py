"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditLogEntryCreate
    from app.application.dtos.quote import QuoteResult


class ICounterStore(Protocol):
    """Shared counter/window store for the quote anti-abuse gate.

    Every operation is atomic with respect to concurrent callers on the
    same key. Implementations raise StoreUnavailableException when the
    backing store cannot be consulted.
    """

    async def claim(self, key: str, ttl_seconds: int) -> bool:
        """Set key with expiry only if absent. Returns False when already present."""

    async def release(self, key: str) -> None:
        """Delete key (undo a claim)."""

    async def add_within_limit(
        self, key: str, member: str, window_seconds: int, limit: int
    ) -> bool:
        """Add member to a rolling window unless it already holds limit members.

        Members older than window_seconds are dropped first. Returns False at
        the ceiling (member not added).
        """

    async def remove_member(self, key: str, member: str) -> None:
        """Remove one member from a rolling window."""

    async def ping(self) -> bool:
        """Return True when the store is reachable."""


class IAuditSink(Protocol):
    """Append-only sink for authentication and authorization outcomes.

    Implementations never raise: a failed write is logged and dropped.
    """

    async def record(self, entry: AuditLogEntryCreate) -> None:
        """Append one entry."""


class IQuoteNotifier(Protocol):
    """Notify staff that a quote request was accepted."""

    async def notify_quote_received(self, quote: QuoteResult) -> None:
        """Send notification; may raise on delivery failure."""


class ICaptchaVerifier(Protocol):
    """Server-side check of a CAPTCHA widget token (Turnstile or hCaptcha)."""

    async def verify(self, token: str, remote_ip: str | None) -> bool:
        """True when the provider accepts the token.

        Raises StoreUnavailableException when the provider cannot be reached.
        """
