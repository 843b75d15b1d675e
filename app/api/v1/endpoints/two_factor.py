"""Two-factor API: status, setup (initiate and confirm), disable, backup-code regeneration.

All routes act on the authenticated admin's own credential.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from app.api.v1.dependencies import (
    CurrentPrincipal,
    get_client_context,
    get_two_factor_service,
)
from app.application.dtos.auth import ClientContext
from app.application.services import TwoFactorService
from app.core.limiter import limit_two_factor
from app.schemas.auth import (
    BackupCodesResponse,
    TwoFactorCodeRequest,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
)

router = APIRouter()

TwoFactorDep = Annotated[TwoFactorService, Depends(get_two_factor_service)]
ClientDep = Annotated[ClientContext, Depends(get_client_context)]


@router.get("/status", response_model=TwoFactorStatusResponse)
async def two_factor_status(principal: CurrentPrincipal, two_factor: TwoFactorDep):
    return TwoFactorStatusResponse.model_validate(
        await two_factor.get_status(principal.admin_id)
    )


@router.post("/setup", response_model=TwoFactorSetupResponse)
@limit_two_factor
async def initiate_setup(
    request: Request,
    principal: CurrentPrincipal,
    two_factor: TwoFactorDep,
    client: ClientDep,
):
    """Generate a new secret (pending until confirmed). 409 if 2FA is already enabled."""
    result = await two_factor.begin_setup(principal.admin_id, client)
    return TwoFactorSetupResponse.model_validate(result)


@router.post("/enable", response_model=BackupCodesResponse)
@limit_two_factor
async def confirm_setup(
    request: Request,
    body: TwoFactorCodeRequest,
    principal: CurrentPrincipal,
    two_factor: TwoFactorDep,
    client: ClientDep,
):
    """Confirm setup with a current TOTP code. Returns the backup codes once."""
    result = await two_factor.confirm_setup(principal.admin_id, body.code, client)
    return BackupCodesResponse(codes=result.codes)


@router.post("/disable", status_code=status.HTTP_204_NO_CONTENT)
@limit_two_factor
async def disable(
    request: Request,
    body: TwoFactorCodeRequest,
    principal: CurrentPrincipal,
    two_factor: TwoFactorDep,
    client: ClientDep,
) -> None:
    """Disable 2FA; requires a current TOTP code or an unused backup code."""
    await two_factor.disable(principal.admin_id, body.code, client)


@router.post("/backup-codes/regenerate", response_model=BackupCodesResponse)
@limit_two_factor
async def regenerate_backup_codes(
    request: Request,
    principal: CurrentPrincipal,
    two_factor: TwoFactorDep,
    client: ClientDep,
):
    """Invalidate every previous backup code and return a fresh set once."""
    result = await two_factor.regenerate_backup_codes(principal.admin_id, client)
    return BackupCodesResponse(codes=result.codes)
