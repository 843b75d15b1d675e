"""Auth and two-factor API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    """Request body for login step 1."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=256)


class TwoFactorLoginRequest(BaseModel):
    """Request body for login step 2: pending token from step 1 plus a TOTP or backup code."""

    model_config = ConfigDict(extra="forbid")

    pending_token: str = Field(..., min_length=1)
    code: str = Field(..., min_length=6, max_length=32)


class AdminResponse(BaseModel):
    """Admin profile (no password hash, no 2FA secret)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: str
    is_active: bool
    two_factor_enabled: bool
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class TokenResponse(BaseModel):
    """Access token response. The refresh token travels only in the httpOnly cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin: AdminResponse | None = None


class LoginResponse(BaseModel):
    """Step 1 result: tokens, or two_factor_required with a pending token."""

    two_factor_required: bool = False
    pending_token: str | None = None
    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    admin: AdminResponse | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    current_password: str = Field(..., min_length=1, max_length=256)
    new_password: str = Field(..., min_length=8, max_length=256)


class LogoutAllResponse(BaseModel):
    revoked_sessions: int


class TwoFactorCodeRequest(BaseModel):
    """A TOTP code (6 digits) or, where accepted, a backup code."""

    model_config = ConfigDict(extra="forbid")

    code: str = Field(..., min_length=6, max_length=32)


class TwoFactorStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    state: str
    confirmed_at: datetime | None = None
    backup_codes_remaining: int


class TwoFactorSetupResponse(BaseModel):
    """Returned once: base32 secret, otpauth URI and a PNG data URI of its QR code."""

    model_config = ConfigDict(from_attributes=True)

    secret: str
    otpauth_url: str
    qr_code_data_uri: str


class BackupCodesResponse(BaseModel):
    """Plaintext backup codes, shown exactly once."""

    codes: list[str]
