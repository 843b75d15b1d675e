"""Application DTOs (no ORM dependency)."""

from app.application.dtos.admin import AdminAuthRecord, AdminResult
from app.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogFilter,
    AuditLogResult,
    AuditLogStats,
)
from app.application.dtos.auth import (
    ClientContext,
    LoginResult,
    Principal,
    RefreshSessionRecord,
    TokenPair,
)
from app.application.dtos.quote import QuoteCreate, QuoteResult, QuoteSubmission
from app.application.dtos.two_factor import (
    BackupCodesResult,
    TwoFactorSetupResult,
    TwoFactorStatus,
)

__all__ = [
    "AdminAuthRecord",
    "AdminResult",
    "AuditLogEntryCreate",
    "AuditLogFilter",
    "AuditLogResult",
    "AuditLogStats",
    "BackupCodesResult",
    "ClientContext",
    "LoginResult",
    "Principal",
    "QuoteCreate",
    "QuoteResult",
    "QuoteSubmission",
    "RefreshSessionRecord",
    "TokenPair",
    "TwoFactorSetupResult",
    "TwoFactorStatus",
]
