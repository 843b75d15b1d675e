"""DTOs for login, token refresh and the authenticated principal."""

from dataclasses import dataclass
from datetime import datetime

from app.application.dtos.admin import AdminResult


@dataclass(frozen=True)
class ClientContext:
    """Request metadata recorded with sessions and audit entries."""

    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class Principal:
    """Authenticated caller extracted from a verified access token."""

    admin_id: str
    email: str
    role: str


@dataclass(frozen=True)
class TokenPair:
    """Access token (bearer) plus opaque refresh token (cookie only)."""

    access_token: str
    refresh_token: str
    access_expires_in: int
    refresh_expires_at: datetime
    token_type: str = "bearer"


@dataclass(frozen=True)
class LoginResult:
    """Outcome of login step 1 or 2.

    Either tokens are set (login complete) or two_factor_required is True and
    pending_token carries the account id for the second step.
    """

    admin: AdminResult
    tokens: TokenPair | None = None
    two_factor_required: bool = False
    pending_token: str | None = None


@dataclass(frozen=True)
class RefreshSessionRecord:
    """One refresh-token grant. Only the token hash is stored."""

    id: str
    admin_id: str
    family_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime | None = None
    revoked_at: datetime | None = None
    replaced_by_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
