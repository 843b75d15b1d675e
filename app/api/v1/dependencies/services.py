"""Application service dependencies (composition root).

Services receive explicit collaborators and a config dataclass built from
settings here; nothing below the API layer reads settings.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.api.v1.dependencies.db import (
    get_admin_repo,
    get_audit_sink,
    get_backup_code_repo,
    get_quote_repo,
    get_refresh_token_repo,
)
from app.api.v1.dependencies.security import (
    get_password_hasher,
    get_secret_encryptor,
    get_token_hasher,
    get_token_signer,
    get_totp_service,
)
from app.application.interfaces import (
    IAdminRepository,
    IAuditSink,
    IBackupCodeRepository,
    ICaptchaVerifier,
    ICounterStore,
    IQuoteRepository,
    IRefreshTokenRepository,
)
from app.application.services import (
    AdminService,
    AuthConfig,
    AuthorizationService,
    AuthService,
    QuoteAntiAbuseGate,
    QuoteGuardConfig,
    QuoteNotificationDispatcher,
    QuoteService,
    TwoFactorConfig,
    TwoFactorService,
)
from app.core.config import get_settings
from app.domain.exceptions import StoreUnavailableException
from app.infrastructure.security import (
    PasswordHasher,
    SecretEncryptor,
    TokenHasher,
    TokenSigner,
    TotpService,
)


def get_counter_store(request: Request) -> ICounterStore:
    """Counter store created in lifespan (app.state.counter_store)."""
    store = getattr(request.app.state, "counter_store", None)
    if store is None:
        raise StoreUnavailableException("counter_store")
    return store


def get_captcha_verifier(request: Request) -> ICaptchaVerifier | None:
    """CAPTCHA verifier created in lifespan; None when no CAPTCHA keys are configured."""
    return getattr(request.app.state, "captcha_verifier", None)


def get_quote_dispatcher(request: Request) -> QuoteNotificationDispatcher:
    """Application-wide notification dispatcher created in lifespan."""
    dispatcher = getattr(request.app.state, "quote_dispatcher", None)
    if dispatcher is None:
        raise StoreUnavailableException("quote_dispatcher")
    return dispatcher


def get_authorization_service(
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
) -> AuthorizationService:
    return AuthorizationService(audit_sink)


def get_two_factor_service(
    admin_repo: Annotated[IAdminRepository, Depends(get_admin_repo)],
    backup_code_repo: Annotated[IBackupCodeRepository, Depends(get_backup_code_repo)],
    totp: Annotated[TotpService, Depends(get_totp_service)],
    encryptor: Annotated[SecretEncryptor, Depends(get_secret_encryptor)],
    token_hasher: Annotated[TokenHasher, Depends(get_token_hasher)],
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
) -> TwoFactorService:
    return TwoFactorService(
        admin_repo,
        backup_code_repo,
        totp,
        encryptor,
        token_hasher,
        audit_sink,
        TwoFactorConfig(backup_code_count=get_settings().backup_code_count),
    )


def get_auth_service(
    admin_repo: Annotated[IAdminRepository, Depends(get_admin_repo)],
    refresh_repo: Annotated[IRefreshTokenRepository, Depends(get_refresh_token_repo)],
    signer: Annotated[TokenSigner, Depends(get_token_signer)],
    token_hasher: Annotated[TokenHasher, Depends(get_token_hasher)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    two_factor: Annotated[TwoFactorService, Depends(get_two_factor_service)],
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
) -> AuthService:
    settings = get_settings()
    return AuthService(
        admin_repo,
        refresh_repo,
        signer,
        token_hasher,
        password_hasher,
        two_factor,
        audit_sink,
        AuthConfig(
            access_token_expire_minutes=settings.access_token_expire_minutes,
            refresh_token_expire_days=settings.refresh_token_expire_days,
        ),
    )


def get_admin_service(
    admin_repo: Annotated[IAdminRepository, Depends(get_admin_repo)],
    refresh_repo: Annotated[IRefreshTokenRepository, Depends(get_refresh_token_repo)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
) -> AdminService:
    return AdminService(admin_repo, refresh_repo, password_hasher, audit_sink)


def get_quote_gate(
    store: Annotated[ICounterStore, Depends(get_counter_store)],
    captcha: Annotated[ICaptchaVerifier | None, Depends(get_captcha_verifier)],
) -> QuoteAntiAbuseGate:
    settings = get_settings()
    return QuoteAntiAbuseGate(
        store,
        QuoteGuardConfig(
            min_fill_ms=settings.quote_min_fill_ms,
            max_form_age_minutes=settings.quote_max_form_age_minutes,
            dedup_window_minutes=settings.quote_dedup_window_minutes,
            max_per_email_per_day=settings.quote_max_per_email_per_day,
            fail_open=settings.quote_counter_fail_open,
        ),
        captcha=captcha,
    )


def get_quote_service(
    quote_repo: Annotated[IQuoteRepository, Depends(get_quote_repo)],
    gate: Annotated[QuoteAntiAbuseGate, Depends(get_quote_gate)],
    dispatcher: Annotated[QuoteNotificationDispatcher, Depends(get_quote_dispatcher)],
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
) -> QuoteService:
    return QuoteService(quote_repo, gate, dispatcher, audit_sink)
