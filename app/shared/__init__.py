"""Cross-cutting helpers: request context, enums, telemetry. No business logic."""

from app.shared.context import (
    get_current_actor_id,
    get_request_id,
    set_current_actor,
    set_request_id,
)
from app.shared.enums import (
    ActorType,
    AuditAction,
    QuoteRejectionRule,
    QuoteStatus,
    SecurityEvent,
)

__all__ = [
    "ActorType",
    "AuditAction",
    "QuoteRejectionRule",
    "QuoteStatus",
    "SecurityEvent",
    "get_current_actor_id",
    "get_request_id",
    "set_current_actor",
    "set_request_id",
]
