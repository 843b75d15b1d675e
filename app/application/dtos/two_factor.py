"""DTOs for two-factor setup and status."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TwoFactorStatus:
    enabled: bool
    state: str
    confirmed_at: datetime | None
    backup_codes_remaining: int


@dataclass(frozen=True)
class TwoFactorSetupResult:
    """Returned once on setup initiation: secret, otpauth URI and QR data URI."""

    secret: str
    otpauth_url: str
    qr_code_data_uri: str


@dataclass(frozen=True)
class BackupCodesResult:
    """Plaintext backup codes. Shown exactly once; only hashes are stored."""

    codes: list[str] = field(default_factory=list)
