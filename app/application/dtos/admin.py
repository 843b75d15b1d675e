"""DTOs for admin accounts (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AdminResult:
    """Admin read-model. No password hash, no 2FA secret."""

    id: str
    email: str
    name: str
    role: str
    is_active: bool
    two_factor_enabled: bool
    created_at: datetime | None = None
    last_login_at: datetime | None = None


@dataclass(frozen=True)
class AdminAuthRecord:
    """Admin record as the credential and 2FA services need it. Never leaves the service layer."""

    id: str
    email: str
    name: str
    role: str
    is_active: bool
    hashed_password: str
    two_factor_enabled: bool = False
    two_factor_secret: str | None = None
    two_factor_confirmed_at: datetime | None = None
    two_factor_last_used_step: int | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None

    def to_result(self) -> AdminResult:
        return AdminResult(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            is_active=self.is_active,
            two_factor_enabled=self.two_factor_enabled,
            created_at=self.created_at,
            last_login_at=self.last_login_at,
        )
