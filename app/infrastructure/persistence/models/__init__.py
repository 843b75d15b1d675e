"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.admin import Admin
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.quote_request import QuoteRequest
from app.infrastructure.persistence.models.refresh_token import RefreshToken
from app.infrastructure.persistence.models.two_factor_backup_code import TwoFactorBackupCode

__all__ = [
    "Admin",
    "AuditLog",
    "CreatedAtMixin",
    "CuidMixin",
    "QuoteRequest",
    "RefreshToken",
    "TimestampMixin",
    "TwoFactorBackupCode",
]
