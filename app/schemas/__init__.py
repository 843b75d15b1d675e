"""Pydantic request/response schemas for the API."""

from app.schemas.admin import RoleChangeRequest
from app.schemas.audit_log import (
    AuditLogEntryResponse,
    AuditLogListResponse,
    AuditLogStatsResponse,
)
from app.schemas.auth import (
    AdminResponse,
    BackupCodesResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutAllResponse,
    TokenResponse,
    TwoFactorCodeRequest,
    TwoFactorLoginRequest,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
)
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.quote import (
    QuoteAcceptedResponse,
    QuoteCreateRequest,
    QuoteListResponse,
    QuoteResponse,
)

__all__ = [
    "AdminResponse",
    "AuditLogEntryResponse",
    "AuditLogListResponse",
    "AuditLogStatsResponse",
    "BackupCodesResponse",
    "ChangePasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutAllResponse",
    "QuoteAcceptedResponse",
    "QuoteCreateRequest",
    "QuoteListResponse",
    "QuoteResponse",
    "ReadinessResponse",
    "RoleChangeRequest",
    "TokenResponse",
    "TwoFactorCodeRequest",
    "TwoFactorLoginRequest",
    "TwoFactorSetupResponse",
    "TwoFactorStatusResponse",
]
