"""Audit sink: appends authentication/authorization outcomes to audit_log.

Each entry is written in its own session and committed immediately, so
failures are recorded even when the request's own transaction rolls back.
A failed write is logged and dropped; auditing never fails the request.
"""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.audit_log import AuditLogEntryCreate
from app.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from app.shared.context import get_request_id
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class DatabaseAuditSink:
    """IAuditSink backed by the audit_log table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, entry: AuditLogEntryCreate) -> None:
        """Append one entry; attach the current request id when the caller did not."""
        if entry.request_id is None:
            entry = replace(entry, request_id=get_request_id())
        try:
            async with self._session_factory() as session:
                await AuditLogRepository(session).create(entry)
        except (SQLAlchemyError, OSError):
            logger.exception(
                "Audit write failed (action=%s, success=%s)", entry.action, entry.success
            )
