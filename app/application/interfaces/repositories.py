"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.admin import AdminAuthRecord, AdminResult
    from app.application.dtos.audit_log import (
        AuditLogEntryCreate,
        AuditLogFilter,
        AuditLogResult,
        AuditLogStats,
    )
    from app.application.dtos.auth import RefreshSessionRecord
    from app.application.dtos.quote import QuoteCreate, QuoteResult


class IAdminRepository(Protocol):
    """Protocol for the admin account store, keyed by id and normalized email."""

    async def get_auth_record_by_email(self, email: str) -> AdminAuthRecord | None:
        """Return credential record by normalized email, or None."""

    async def get_auth_record_by_id(self, admin_id: str) -> AdminAuthRecord | None:
        """Return credential record by id, or None."""

    async def get_by_id(self, admin_id: str) -> AdminResult | None:
        """Return admin read-model by id, or None."""

    async def list_admins(self, skip: int = 0, limit: int = 100) -> list[AdminResult]:
        """Return admins ordered by creation time."""

    async def create(
        self, email: str, hashed_password: str, name: str, role: str
    ) -> AdminResult:
        """Create admin; raises AdminAlreadyExistsException on duplicate email."""

    async def update_password(self, admin_id: str, hashed_password: str) -> None:
        """Replace the stored password hash."""

    async def update_role(self, admin_id: str, role: str) -> AdminResult | None:
        """Set role; return updated admin or None if not found."""

    async def record_login(self, admin_id: str, at: datetime) -> None:
        """Set last_login_at."""

    async def save_two_factor(
        self,
        admin_id: str,
        *,
        encrypted_secret: str | None,
        enabled: bool,
        confirmed_at: datetime | None,
    ) -> None:
        """Persist the 2FA secret/enabled/confirmed_at triple.

        When enabled is False (new setup or disable) the TOTP replay guard is reset.
        """

    async def claim_totp_step(self, admin_id: str, step: int) -> bool:
        """Atomically record step as used if it is newer than the last used step.

        Returns False when the step (or a later one) was already used (replay).
        """


class IBackupCodeRepository(Protocol):
    """Protocol for hashed single-use backup codes."""

    async def replace_all(self, admin_id: str, code_hashes: list[str]) -> None:
        """Delete every existing code for admin and store the new hashes."""

    async def consume(self, admin_id: str, code_hash: str, at: datetime) -> bool:
        """Mark a matching unused code as used. Returns False if none matched (atomic)."""

    async def count_remaining(self, admin_id: str) -> int:
        """Return number of unused codes."""

    async def delete_all(self, admin_id: str) -> None:
        """Remove every code for admin."""


class IRefreshTokenRepository(Protocol):
    """Protocol for refresh-session records (hash only, never the token)."""

    async def create(
        self,
        *,
        admin_id: str,
        family_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
    ) -> RefreshSessionRecord:
        """Store a new refresh session."""

    async def get_by_hash(self, token_hash: str) -> RefreshSessionRecord | None:
        """Return session by token hash (revoked or not), or None."""

    async def revoke_if_active(
        self, session_id: str, at: datetime, replaced_by_id: str | None = None
    ) -> bool:
        """Compare-and-swap revoke: only succeeds if not already revoked."""

    async def revoke_family(self, family_id: str, at: datetime) -> int:
        """Revoke every active session in the rotation family. Returns count."""

    async def revoke_all_for_admin(self, admin_id: str, at: datetime) -> int:
        """Revoke every active session of the admin. Returns count."""

    async def delete_expired(self, before: datetime) -> int:
        """Delete sessions that expired before the given time. Returns count."""


class IAuditLogRepository(Protocol):
    """Protocol for the append-only audit log."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one entry."""

    async def list(
        self, filters: AuditLogFilter, *, skip: int = 0, limit: int = 50
    ) -> tuple[list[AuditLogResult], int]:
        """Return (page newest first, total matching)."""

    async def stats(self, filters: AuditLogFilter) -> AuditLogStats:
        """Return totals and per-action counts for matching entries."""


class IQuoteRepository(Protocol):
    """Protocol for persisted quote requests."""

    async def create(self, data: QuoteCreate) -> QuoteResult:
        """Persist an accepted quote request."""

    async def list(
        self, *, skip: int = 0, limit: int = 50, status: str | None = None
    ) -> tuple[list[QuoteResult], int]:
        """Return (page newest first, total)."""
