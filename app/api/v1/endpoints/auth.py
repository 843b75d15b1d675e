"""Auth API: login (password, then second factor), refresh, logout, profile, password change.

Login and 2FA failures all surface as the same generic 401. The refresh
token only ever travels in the httpOnly cookie set here.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import (
    CurrentPrincipal,
    get_auth_service,
    get_client_context,
)
from app.api.v1.endpoints._cookies import (
    clear_refresh_cookie,
    read_refresh_cookie,
    set_refresh_cookie,
)
from app.application.dtos.auth import ClientContext, TokenPair
from app.application.services import AuthService
from app.core.limiter import limit_auth, limit_refresh, limit_two_factor, limit_writes
from app.domain.exceptions import AuthenticationException
from app.schemas.auth import (
    AdminResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutAllResponse,
    TokenResponse,
    TwoFactorLoginRequest,
)

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ClientDep = Annotated[ClientContext, Depends(get_client_context)]


def _token_response(tokens: TokenPair, admin: AdminResponse | None = None) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        token_type=tokens.token_type,
        expires_in=tokens.access_expires_in,
        admin=admin,
    )


@router.post("/login", response_model=LoginResponse)
@limit_auth
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthServiceDep,
    client: ClientDep,
):
    """Step 1: verify email and password.

    Without 2FA, returns an access token and sets the refresh cookie. With 2FA
    enabled, returns two_factor_required and a short-lived pending_token for
    POST /auth/2fa/verify; no tokens are issued yet.
    """
    result = await auth_service.login(body.email, body.password, client)
    if result.two_factor_required:
        return LoginResponse(two_factor_required=True, pending_token=result.pending_token)
    set_refresh_cookie(response, result.tokens.refresh_token, result.tokens.refresh_expires_at)
    return LoginResponse(
        access_token=result.tokens.access_token,
        token_type=result.tokens.token_type,
        expires_in=result.tokens.access_expires_in,
        admin=AdminResponse.model_validate(result.admin),
    )


@router.post("/2fa/verify", response_model=TokenResponse)
@limit_two_factor
async def verify_two_factor_login(
    request: Request,
    response: Response,
    body: TwoFactorLoginRequest,
    auth_service: AuthServiceDep,
    client: ClientDep,
):
    """Step 2: exchange the pending token plus a TOTP or backup code for tokens."""
    result = await auth_service.complete_two_factor_login(body.pending_token, body.code, client)
    set_refresh_cookie(response, result.tokens.refresh_token, result.tokens.refresh_expires_at)
    return _token_response(result.tokens, AdminResponse.model_validate(result.admin))


@router.post("/refresh", response_model=TokenResponse)
@limit_refresh
async def refresh(
    request: Request,
    response: Response,
    auth_service: AuthServiceDep,
    client: ClientDep,
):
    """Rotate the refresh cookie and return a new access token.

    On any failure the cookie is cleared. Presenting an already rotated token
    revokes every session descended from the same login.
    """
    try:
        tokens = await auth_service.refresh(read_refresh_cookie(request), client)
    except AuthenticationException as exc:
        failed = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=exc.to_dict(),
            headers={"WWW-Authenticate": "Bearer"},
        )
        clear_refresh_cookie(failed)
        return failed
    set_refresh_cookie(response, tokens.refresh_token, tokens.refresh_expires_at)
    return _token_response(tokens)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    auth_service: AuthServiceDep,
    client: ClientDep,
) -> Response:
    """Revoke the current refresh session and clear the cookie. Idempotent."""
    await auth_service.logout(read_refresh_cookie(request), client)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    return response


@router.post("/logout-all", response_model=LogoutAllResponse)
async def logout_all(
    response: Response,
    principal: CurrentPrincipal,
    auth_service: AuthServiceDep,
    client: ClientDep,
):
    """Revoke every refresh session of the caller (all devices)."""
    revoked = await auth_service.logout_all(principal.admin_id, client)
    clear_refresh_cookie(response)
    return LogoutAllResponse(revoked_sessions=revoked)


@router.get("/me", response_model=AdminResponse)
async def get_me(principal: CurrentPrincipal, auth_service: AuthServiceDep):
    """Return the authenticated admin. Requires Authorization: Bearer <access token>."""
    return AdminResponse.model_validate(await auth_service.get_me(principal.admin_id))


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
@limit_writes
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    principal: CurrentPrincipal,
    auth_service: AuthServiceDep,
    client: ClientDep,
) -> Response:
    """Change password (current password required). Signs out every session."""
    await auth_service.change_password(
        principal.admin_id, body.current_password, body.new_password, client
    )
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response)
    return response
