"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogFilter,
    AuditLogResult,
    AuditLogStats,
)
from app.infrastructure.persistence.models.audit_log import AuditLog
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc
from app.shared.utils.generators import generate_cuid


def _orm_to_result(row: AuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        actor_id=row.actor_id,
        action=row.action,
        resource=row.resource,
        resource_id=row.resource_id,
        success=row.success,
        error_message=row.error_message,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        request_id=row.request_id,
        details=row.details,
        created_at=ensure_utc(row.created_at),
    )


def _conditions(filters: AuditLogFilter) -> list[Any]:
    conditions: list[Any] = []
    if filters.actor_id is not None:
        conditions.append(AuditLog.actor_id == filters.actor_id)
    if filters.action is not None:
        conditions.append(AuditLog.action == filters.action)
    if filters.resource is not None:
        conditions.append(AuditLog.resource == filters.resource)
    if filters.success is not None:
        conditions.append(AuditLog.success.is_(filters.success))
    if filters.from_timestamp is not None:
        conditions.append(AuditLog.created_at >= filters.from_timestamp)
    if filters.to_timestamp is not None:
        conditions.append(AuditLog.created_at <= filters.to_timestamp)
    return conditions


class AuditLogRepository(BaseRepository[AuditLog]):
    """Append-only audit log repository. No update; retention purge only."""

    def __init__(self, db: AsyncSession, *, commit_writes: bool = True) -> None:
        super().__init__(db, AuditLog, commit_writes=commit_writes)

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""
        row = AuditLog(
            id=generate_cuid(),
            actor_id=entry.actor_id,
            action=entry.action,
            resource=entry.resource,
            resource_id=entry.resource_id,
            success=entry.success,
            error_message=entry.error_message,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            request_id=entry.request_id,
            details=entry.details,
        )
        row = await self._add(row)
        return _orm_to_result(row)

    async def list(
        self, filters: AuditLogFilter, *, skip: int = 0, limit: int = 50
    ) -> tuple[list[AuditLogResult], int]:
        """List entries matching filters (newest first) and the total count."""
        conditions = _conditions(filters)
        total = await self.db.scalar(
            select(func.count()).select_from(AuditLog).where(*conditions)
        )
        stmt = (
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()], int(total or 0)

    async def stats(self, filters: AuditLogFilter) -> AuditLogStats:
        result = await self.db.execute(
            select(AuditLog.action, AuditLog.success, func.count())
            .where(*_conditions(filters))
            .group_by(AuditLog.action, AuditLog.success)
        )
        by_action: dict[str, int] = {}
        total = failures = 0
        for action, success, count in result.all():
            by_action[action] = by_action.get(action, 0) + count
            total += count
            if not success:
                failures += count
        return AuditLogStats(total=total, failures=failures, by_action=by_action)

    async def purge_older_than(self, before: datetime) -> int:
        """Retention purge (bulk DELETE, bypasses the row-level delete guard)."""
        result = await self.db.execute(delete(AuditLog).where(AuditLog.created_at < before))
        await self._persist()
        return int(result.rowcount or 0)
