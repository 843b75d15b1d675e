"""Audit log read models for GET /audit-logs and /audit-logs/stats."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogEntryResponse(BaseModel):
    """One authentication, authorization or admin outcome. details never hold secrets."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    actor_id: str | None
    action: str
    resource: str
    resource_id: str | None
    success: bool
    error_message: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Newest-first page plus the total number of matching entries."""

    items: list[AuditLogEntryResponse]
    total: int
    skip: int
    limit: int


class AuditLogStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    failures: int
    by_action: dict[str, int]
