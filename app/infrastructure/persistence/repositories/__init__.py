"""Repositories: SQLAlchemy implementations of the application repository ports."""

from app.infrastructure.persistence.repositories.admin_repo import AdminRepository
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.infrastructure.persistence.repositories.backup_code_repo import BackupCodeRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.quote_repo import QuoteRepository
from app.infrastructure.persistence.repositories.refresh_token_repo import (
    RefreshTokenRepository,
)

__all__ = [
    "AdminRepository",
    "AuditLogRepository",
    "BackupCodeRepository",
    "BaseRepository",
    "QuoteRepository",
    "RefreshTokenRepository",
]
