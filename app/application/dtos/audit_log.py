"""DTOs for audit log (authentication and authorization outcomes, admin actions)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    action: str
    resource: str
    actor_id: str | None = None
    resource_id: str | None = None
    success: bool = True
    error_message: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model for list)."""

    id: str
    actor_id: str | None
    action: str
    resource: str
    resource_id: str | None
    success: bool
    error_message: str | None
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    details: dict[str, Any] | None
    created_at: datetime


@dataclass(frozen=True)
class AuditLogFilter:
    """Filters for listing audit entries. None means no filter."""

    actor_id: str | None = None
    action: str | None = None
    resource: str | None = None
    success: bool | None = None
    from_timestamp: datetime | None = None
    to_timestamp: datetime | None = None


@dataclass(frozen=True)
class AuditLogStats:
    total: int
    failures: int
    by_action: dict[str, int] = field(default_factory=dict)


def audit_entry(
    action: str,
    resource: str,
    *,
    client: Any = None,
    actor_id: str | None = None,
    resource_id: str | None = None,
    success: bool = True,
    error_message: str | None = None,
    details: dict[str, Any] | None = None,
) -> AuditLogEntryCreate:
    """Build an entry, taking ip/user agent from a ClientContext when given."""
    return AuditLogEntryCreate(
        action=action,
        resource=resource,
        actor_id=actor_id,
        resource_id=resource_id,
        success=success,
        error_message=error_message,
        ip_address=getattr(client, "ip_address", None),
        user_agent=getattr(client, "user_agent", None),
        details=details,
    )
