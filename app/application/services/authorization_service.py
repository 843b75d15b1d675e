"""Authorization service: static role -> permission map; denials are audited.

Permission codes are ``resource:action``. ``resource:manage`` implies every
action on that resource and ``*:manage`` implies everything.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.application.dtos.audit_log import audit_entry
from app.application.dtos.auth import ClientContext, Principal
from app.application.interfaces.services import IAuditSink
from app.domain.enums import AdminRole, PermissionAction
from app.domain.exceptions import AuthorizationException
from app.shared.enums import AuditAction, SecurityEvent
from app.shared.telemetry.logging import log_security_event

ROLE_PERMISSIONS: dict[AdminRole, frozenset[str]] = {
    AdminRole.SUPERADMIN: frozenset({"*:manage"}),
    AdminRole.ADMIN: frozenset(
        {
            "product:manage",
            "quote:manage",
            "category:manage",
            "brand:manage",
            "admin:read",
            "audit:read",
        }
    ),
    AdminRole.EDITOR: frozenset(
        {
            "product:create",
            "product:read",
            "product:update",
            "quote:read",
            "quote:update",
            "category:read",
            "brand:read",
        }
    ),
    AdminRole.VIEWER: frozenset(
        {"product:read", "quote:read", "category:read", "brand:read"}
    ),
}


def permissions_for_role(role: str) -> frozenset[str]:
    """Return permission codes for role; unknown roles get none."""
    try:
        return ROLE_PERMISSIONS[AdminRole(role)]
    except ValueError:
        return frozenset()


def can_perform(role: str, resource: str, action: str) -> bool:
    """Return True if role grants resource:action (directly, via manage, or via *:manage)."""
    permissions = permissions_for_role(role)
    manage = PermissionAction.MANAGE.value
    return (
        f"{resource}:{action}" in permissions
        or f"{resource}:{manage}" in permissions
        or f"*:{manage}" in permissions
    )


class AuthorizationService:
    """Role and permission checks for an authenticated principal.

    Pure in-memory decision; on denial an audit entry and a security log
    event are written before AuthorizationException is raised.
    """

    def __init__(self, audit_sink: IAuditSink) -> None:
        self.audit_sink = audit_sink

    async def _deny(
        self,
        principal: Principal,
        resource: str,
        action: str,
        client: ClientContext | None,
        detail: dict[str, object],
    ) -> None:
        log_security_event(
            SecurityEvent.AUTHORIZATION_DENIED.value,
            admin_id=principal.admin_id,
            role=principal.role,
            resource=resource,
            action=action,
        )
        await self.audit_sink.record(
            audit_entry(
                AuditAction.ACCESS_DENIED.value,
                resource,
                client=client,
                actor_id=principal.admin_id,
                success=False,
                error_message="Permission denied",
                details={"attempted_action": action, "role": principal.role, **detail},
            )
        )
        raise AuthorizationException(resource=resource, action=action)

    async def require_permission(
        self,
        principal: Principal,
        resource: str,
        action: str,
        client: ClientContext | None = None,
    ) -> None:
        """Raise AuthorizationException if the principal's role lacks resource:action."""
        if not can_perform(principal.role, resource, action):
            await self._deny(principal, resource, action, client, {})

    async def require_role(
        self,
        principal: Principal,
        allowed_roles: Iterable[AdminRole],
        action: str,
        client: ClientContext | None = None,
    ) -> None:
        """Raise AuthorizationException if principal.role is not one of allowed_roles."""
        allowed = {r.value for r in allowed_roles}
        if principal.role not in allowed:
            await self._deny(
                principal, "role", action, client, {"allowed_roles": sorted(allowed)}
            )
