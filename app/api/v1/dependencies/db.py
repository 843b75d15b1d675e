"""Repository and audit sink dependencies (composition root).

Authentication-path repositories commit each write on their own (see
app.infrastructure.persistence.database), so one request-scoped session
is shared by all of them.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import get_db, get_session_factory
from app.infrastructure.persistence.repositories import (
    AdminRepository,
    AuditLogRepository,
    BackupCodeRepository,
    QuoteRepository,
    RefreshTokenRepository,
)
from app.infrastructure.services import DatabaseAuditSink


async def get_admin_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminRepository:
    return AdminRepository(db)


async def get_backup_code_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BackupCodeRepository:
    return BackupCodeRepository(db)


async def get_refresh_token_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RefreshTokenRepository:
    return RefreshTokenRepository(db)


async def get_audit_log_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditLogRepository:
    """Audit log repository for reads. Writes go through the audit sink."""
    return AuditLogRepository(db)


async def get_quote_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> QuoteRepository:
    return QuoteRepository(db)


def get_audit_sink() -> DatabaseAuditSink:
    """Audit sink writing in its own session (entries survive request rollback)."""
    return DatabaseAuditSink(get_session_factory())
