"""Authentication and authorization dependencies.

get_current_principal verifies the bearer access token and re-reads the
admin so a deactivated account or a changed role applies immediately.
require_permission / require_role build per-route guards; denials are
audited by AuthorizationService before the 403 is raised.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.api.v1.dependencies.db import get_admin_repo
from app.api.v1.dependencies.services import get_auth_service, get_authorization_service
from app.application.dtos.auth import ClientContext, Principal
from app.application.interfaces import IAdminRepository
from app.application.services import AuthorizationService, AuthService
from app.core.config import get_settings
from app.core.constants import NOT_AUTHENTICATED_MESSAGE
from app.domain.enums import AdminRole
from app.domain.exceptions import AuthenticationException
from app.shared.context import set_current_actor
from app.shared.enums import ActorType
from app.shared.request_audit import client_ip, client_user_agent

_http_bearer = HTTPBearer(auto_error=False)


def get_client_context(request: Request) -> ClientContext:
    """IP and user agent of the caller, recorded on sessions and audit entries."""
    return ClientContext(
        ip_address=client_ip(request, get_settings().trust_forwarded_for),
        user_agent=client_user_agent(request),
    )


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    admin_repo: Annotated[IAdminRepository, Depends(get_admin_repo)],
) -> Principal:
    """Return the authenticated admin for a valid bearer access token.

    Raises:
        AuthenticationException: Missing/invalid/expired token or inactive account (401).
    """
    token = credentials.credentials if credentials else None
    principal = auth_service.verify_access_token(token)
    admin = await admin_repo.get_by_id(principal.admin_id)
    if admin is None or not admin.is_active:
        raise AuthenticationException(NOT_AUTHENTICATED_MESSAGE)
    set_current_actor(admin.id, ActorType.ADMIN)
    return Principal(admin_id=admin.id, email=admin.email, role=admin.role)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_permission(resource: str, action: str) -> Callable[..., Awaitable[Principal]]:
    """Dependency factory: principal must hold resource:action (or manage on it)."""

    async def dependency(
        principal: CurrentPrincipal,
        authz: Annotated[AuthorizationService, Depends(get_authorization_service)],
        client: Annotated[ClientContext, Depends(get_client_context)],
    ) -> Principal:
        await authz.require_permission(principal, resource, action, client)
        return principal

    return dependency


def require_role(*roles: AdminRole, action: str) -> Callable[..., Awaitable[Principal]]:
    """Dependency factory: principal's role must be one of roles."""

    async def dependency(
        principal: CurrentPrincipal,
        authz: Annotated[AuthorizationService, Depends(get_authorization_service)],
        client: Annotated[ClientContext, Depends(get_client_context)],
    ) -> Principal:
        await authz.require_role(principal, roles, action, client)
        return principal

    return dependency
