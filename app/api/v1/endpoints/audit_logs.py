"""Audit log API: filtered list and aggregate stats (permission audit:read)."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import get_audit_log_repo, require_permission
from app.application.dtos.audit_log import AuditLogFilter
from app.application.dtos.auth import Principal
from app.application.interfaces import IAuditLogRepository
from app.domain.enums import PermissionAction
from app.schemas.audit_log import (
    AuditLogEntryResponse,
    AuditLogListResponse,
    AuditLogStatsResponse,
)

router = APIRouter()

AuditReader = Annotated[
    Principal, Depends(require_permission("audit", PermissionAction.READ.value))
]
AuditRepoDep = Annotated[IAuditLogRepository, Depends(get_audit_log_repo)]


def _filters(
    actor_id: str | None = Query(None),
    action: str | None = Query(None, max_length=100),
    resource: str | None = Query(None, max_length=100),
    success: bool | None = Query(None),
    from_timestamp: datetime | None = Query(None),
    to_timestamp: datetime | None = Query(None),
) -> AuditLogFilter:
    return AuditLogFilter(
        actor_id=actor_id,
        action=action,
        resource=resource,
        success=success,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
    )


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    _: AuditReader,
    repo: AuditRepoDep,
    filters: Annotated[AuditLogFilter, Depends(_filters)],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """List audit entries newest first."""
    items, total = await repo.list(filters, skip=skip, limit=limit)
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.model_validate(e) for e in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/stats", response_model=AuditLogStatsResponse)
async def audit_log_stats(
    _: AuditReader,
    repo: AuditRepoDep,
    filters: Annotated[AuditLogFilter, Depends(_filters)],
):
    """Totals, failures and per-action counts for the matching entries."""
    return AuditLogStatsResponse.model_validate(await repo.stats(filters))
