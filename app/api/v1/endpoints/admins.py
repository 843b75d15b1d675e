"""Admin management API: list admins, change role (superadmin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_admin_service,
    get_client_context,
    require_permission,
    require_role,
)
from app.application.dtos.auth import ClientContext, Principal
from app.application.services import AdminService
from app.domain.enums import AdminRole, PermissionAction
from app.schemas.admin import RoleChangeRequest
from app.schemas.auth import AdminResponse

router = APIRouter()

AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]


@router.get("", response_model=list[AdminResponse])
async def list_admins(
    admin_service: AdminServiceDep,
    _: Annotated[Principal, Depends(require_permission("admin", PermissionAction.READ.value))],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    admins = await admin_service.list_admins(skip=skip, limit=limit)
    return [AdminResponse.model_validate(a) for a in admins]


@router.patch("/{admin_id}/role", response_model=AdminResponse)
async def change_role(
    admin_id: str,
    body: RoleChangeRequest,
    admin_service: AdminServiceDep,
    principal: Annotated[
        Principal, Depends(require_role(AdminRole.SUPERADMIN, action="admin.role_change"))
    ],
    client: Annotated[ClientContext, Depends(get_client_context)],
):
    """Change another admin's role; their sessions are revoked so it applies at once."""
    updated = await admin_service.change_role(principal, admin_id, body.role.value, client)
    return AdminResponse.model_validate(updated)
