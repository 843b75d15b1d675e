"""Credential and session service: password login, 2FA completion, refresh rotation, logout.

Every failure the caller can observe is the same generic AuthenticationException;
the specific reason goes to the security log and the audit log. Refresh tokens
rotate on every use and a reused (already rotated) token revokes its whole family.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from app.application.dtos.admin import AdminAuthRecord, AdminResult
from app.application.dtos.audit_log import audit_entry
from app.application.dtos.auth import (
    ClientContext,
    LoginResult,
    Principal,
    RefreshSessionRecord,
    TokenPair,
)
from app.application.interfaces.repositories import IAdminRepository, IRefreshTokenRepository
from app.application.interfaces.services import IAuditSink
from app.application.services.two_factor_service import (
    TwoFactorService,
    credential_from_record,
)
from app.core.constants import NOT_AUTHENTICATED_MESSAGE
from app.domain.exceptions import (
    AuthenticationException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects import EmailAddress
from app.infrastructure.security.jwt import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_PENDING_2FA,
    TokenSigner,
)
from app.infrastructure.security.password import PasswordHasher
from app.infrastructure.security.tokens import TokenHasher, generate_refresh_token
from app.shared.enums import AuditAction, SecurityEvent
from app.shared.telemetry.logging import get_logger, log_security_event
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid
from app.shared.utils.masking import mask_email, mask_ip

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class AuthConfig:
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7


class AuthService:
    """Authenticate admins and manage their refresh sessions."""

    def __init__(
        self,
        admin_repo: IAdminRepository,
        refresh_repo: IRefreshTokenRepository,
        signer: TokenSigner,
        token_hasher: TokenHasher,
        password_hasher: PasswordHasher,
        two_factor: TwoFactorService,
        audit_sink: IAuditSink,
        config: AuthConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.admin_repo = admin_repo
        self.refresh_repo = refresh_repo
        self.signer = signer
        self.token_hasher = token_hasher
        self.password_hasher = password_hasher
        self.two_factor = two_factor
        self.audit_sink = audit_sink
        self.config = config or AuthConfig()
        self.clock = clock

    async def _fail(
        self,
        action: AuditAction,
        reason: str,
        client: ClientContext | None,
        *,
        event: SecurityEvent = SecurityEvent.LOGIN_FAILED,
        actor_id: str | None = None,
        email: str | None = None,
        message: str | None = None,
    ) -> AuthenticationException:
        log_security_event(
            event.value,
            reason=reason,
            admin_id=actor_id,
            email=mask_email(email) if email else None,
            ip=mask_ip(client.ip_address) if client else None,
        )
        await self.audit_sink.record(
            audit_entry(
                action.value,
                "auth",
                client=client,
                actor_id=actor_id,
                success=False,
                error_message=reason,
                details={"email": mask_email(email)} if email else None,
            )
        )
        return AuthenticationException(message) if message else AuthenticationException()

    async def _issue_tokens(
        self,
        record: AdminAuthRecord,
        client: ClientContext | None,
        family_id: str | None = None,
        session_id: str | None = None,
    ) -> TokenPair:
        """Sign an access token and store a new refresh session (hash only)."""
        now = self.clock()
        access_ttl = timedelta(minutes=self.config.access_token_expire_minutes)
        access_token = self.signer.create_access_token(
            record.id, record.email, record.role, expires_delta=access_ttl
        )
        refresh_token = generate_refresh_token()
        expires_at = now + timedelta(days=self.config.refresh_token_expire_days)
        await self.refresh_repo.create(
            admin_id=record.id,
            family_id=family_id or generate_cuid(),
            token_hash=self.token_hasher.hash(refresh_token),
            expires_at=expires_at,
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
            session_id=session_id,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_in=int(access_ttl.total_seconds()),
            refresh_expires_at=expires_at,
        )

    async def _complete_login(
        self, record: AdminAuthRecord, client: ClientContext | None, action: AuditAction, **extra
    ) -> LoginResult:
        tokens = await self._issue_tokens(record, client)
        now = self.clock()
        await self.admin_repo.record_login(record.id, now)
        log_security_event(
            SecurityEvent.LOGIN_SUCCESS.value,
            admin_id=record.id,
            email=mask_email(record.email),
            ip=mask_ip(client.ip_address) if client else None,
            **extra,
        )
        await self.audit_sink.record(
            audit_entry(
                action.value,
                "auth",
                client=client,
                actor_id=record.id,
                details=extra or None,
            )
        )
        return LoginResult(admin=replace(record.to_result(), last_login_at=now), tokens=tokens)

    @traced("auth.login")
    async def login(
        self, email: str, password: str, client: ClientContext | None = None
    ) -> LoginResult:
        """Verify email and password.

        Returns tokens directly, or a pending token when the account has an
        enabled second factor. Unknown email, wrong password and inactive
        account are indistinguishable to the caller and take the same time.

        Raises:
            AuthenticationException: Generic "Invalid credentials".
        """
        try:
            normalized = EmailAddress(email).value
        except ValueError:
            normalized = None
        record = (
            await self.admin_repo.get_auth_record_by_email(normalized) if normalized else None
        )
        stored_hash = record.hashed_password if record else self.password_hasher.dummy_hash
        password_ok = await asyncio.to_thread(
            self.password_hasher.verify, password, stored_hash
        )
        if record is None or not password_ok:
            raise await self._fail(
                AuditAction.LOGIN,
                "unknown_email" if record is None else "bad_password",
                client,
                actor_id=record.id if record else None,
                email=normalized or email,
            )
        if not record.is_active:
            raise await self._fail(
                AuditAction.LOGIN, "inactive", client, actor_id=record.id, email=record.email
            )

        if credential_from_record(record).gates_login:
            add_span_attributes(two_factor_required=True)
            log_security_event(
                SecurityEvent.LOGIN_2FA_REQUIRED.value,
                admin_id=record.id,
                email=mask_email(record.email),
            )
            return LoginResult(
                admin=record.to_result(),
                two_factor_required=True,
                pending_token=self.signer.create_pending_2fa_token(record.id),
            )
        return await self._complete_login(record, client, AuditAction.LOGIN)

    @traced("auth.login_2fa")
    async def complete_two_factor_login(
        self, pending_token: str, code: str, client: ClientContext | None = None
    ) -> LoginResult:
        """Second login step: exchange a pending token and a TOTP or backup code for tokens.

        Raises:
            AuthenticationException: Generic on a bad/expired pending token or a bad code.
        """
        try:
            payload = self.signer.verify(pending_token, TOKEN_TYPE_PENDING_2FA)
        except ValueError as e:
            logger.debug("Pending 2FA token rejected: %s", e)
            raise await self._fail(
                AuditAction.LOGIN_2FA,
                "invalid_pending_token",
                client,
                event=SecurityEvent.TWO_FACTOR_FAILED,
            ) from None
        admin_id = payload["sub"]
        record = await self.admin_repo.get_auth_record_by_id(admin_id)
        if record is None or not record.is_active:
            raise await self._fail(
                AuditAction.LOGIN_2FA,
                "account_unavailable",
                client,
                event=SecurityEvent.TWO_FACTOR_FAILED,
                actor_id=admin_id,
            )
        method = await self.two_factor.verify_for_login(record, code)
        if method is None:
            raise await self._fail(
                AuditAction.LOGIN_2FA,
                "bad_code",
                client,
                event=SecurityEvent.TWO_FACTOR_FAILED,
                actor_id=admin_id,
                email=record.email,
            )
        log_security_event(SecurityEvent.TWO_FACTOR_SUCCESS.value, admin_id=admin_id, method=method)
        return await self._complete_login(record, client, AuditAction.LOGIN_2FA, method=method)

    async def _handle_reuse(
        self, session: RefreshSessionRecord, client: ClientContext | None
    ) -> AuthenticationException:
        """A rotated token came back: assume theft and revoke every descendant session."""
        revoked = await self.refresh_repo.revoke_family(session.family_id, self.clock())
        log_security_event(
            SecurityEvent.REFRESH_TOKEN_REUSE_DETECTED.value,
            level=logging.WARNING,
            admin_id=session.admin_id,
            family_id=session.family_id,
            revoked_sessions=revoked,
            ip=mask_ip(client.ip_address) if client else None,
        )
        await self.audit_sink.record(
            audit_entry(
                AuditAction.REFRESH_REUSE.value,
                "auth",
                client=client,
                actor_id=session.admin_id,
                resource_id=session.family_id,
                success=False,
                error_message="Refresh token reuse detected",
                details={"revoked_sessions": revoked},
            )
        )
        return AuthenticationException(NOT_AUTHENTICATED_MESSAGE)

    async def _reject_revoked(
        self, session: RefreshSessionRecord, client: ClientContext | None
    ) -> AuthenticationException:
        """A revoked token was presented. Only a rotated one (replaced_by_id set) counts as reuse."""
        if session.replaced_by_id is not None:
            return await self._handle_reuse(session, client)
        return await self._fail(
            AuditAction.REFRESH,
            "revoked_token",
            client,
            event=SecurityEvent.TOKEN_REFRESH_FAILED,
            actor_id=session.admin_id,
            message=NOT_AUTHENTICATED_MESSAGE,
        )

    @traced("auth.refresh")
    async def refresh(
        self, refresh_token: str | None, client: ClientContext | None = None
    ) -> TokenPair:
        """Rotate a refresh token: revoke it and issue a new pair in the same family.

        Raises:
            AuthenticationException: Missing, unknown, expired, revoked or reused token.
        """
        if not refresh_token:
            raise await self._fail(
                AuditAction.REFRESH,
                "missing_token",
                client,
                event=SecurityEvent.TOKEN_REFRESH_FAILED,
                message=NOT_AUTHENTICATED_MESSAGE,
            )
        token_hash = self.token_hasher.hash(refresh_token)
        session = await self.refresh_repo.get_by_hash(token_hash)
        if session is None:
            raise await self._fail(
                AuditAction.REFRESH,
                "unknown_token",
                client,
                event=SecurityEvent.TOKEN_REFRESH_FAILED,
                message=NOT_AUTHENTICATED_MESSAGE,
            )
        if session.revoked_at is not None:
            raise await self._reject_revoked(session, client)

        now = self.clock()
        if ensure_utc(session.expires_at) <= now:
            await self.refresh_repo.revoke_if_active(session.id, now)
            raise await self._fail(
                AuditAction.REFRESH,
                "expired_token",
                client,
                event=SecurityEvent.TOKEN_REFRESH_FAILED,
                actor_id=session.admin_id,
                message=NOT_AUTHENTICATED_MESSAGE,
            )

        record = await self.admin_repo.get_auth_record_by_id(session.admin_id)
        if record is None or not record.is_active:
            await self.refresh_repo.revoke_family(session.family_id, now)
            raise await self._fail(
                AuditAction.REFRESH,
                "account_unavailable",
                client,
                event=SecurityEvent.TOKEN_REFRESH_FAILED,
                actor_id=session.admin_id,
                message=NOT_AUTHENTICATED_MESSAGE,
            )

        new_session_id = generate_cuid()
        if not await self.refresh_repo.revoke_if_active(session.id, now, new_session_id):
            # Another request rotated or revoked this token first.
            current = await self.refresh_repo.get_by_hash(token_hash)
            raise await self._reject_revoked(current or session, client)

        tokens = await self._issue_tokens(
            record, client, family_id=session.family_id, session_id=new_session_id
        )
        log_security_event(
            SecurityEvent.TOKEN_REFRESHED.value, admin_id=record.id, family_id=session.family_id
        )
        await self.audit_sink.record(
            audit_entry(AuditAction.REFRESH.value, "auth", client=client, actor_id=record.id)
        )
        return tokens

    async def logout(self, refresh_token: str | None, client: ClientContext | None = None) -> None:
        """Revoke the presented refresh session. Unknown or already revoked tokens are a no-op."""
        if not refresh_token:
            return
        session = await self.refresh_repo.get_by_hash(self.token_hasher.hash(refresh_token))
        if session is None:
            return
        if await self.refresh_repo.revoke_if_active(session.id, self.clock()):
            log_security_event(SecurityEvent.LOGOUT.value, admin_id=session.admin_id)
            await self.audit_sink.record(
                audit_entry(
                    AuditAction.LOGOUT.value, "auth", client=client, actor_id=session.admin_id
                )
            )

    async def logout_all(self, admin_id: str, client: ClientContext | None = None) -> int:
        """Revoke every refresh session of the admin. Returns number revoked."""
        revoked = await self.refresh_repo.revoke_all_for_admin(admin_id, self.clock())
        log_security_event(SecurityEvent.LOGOUT.value, admin_id=admin_id, scope="all", revoked=revoked)
        await self.audit_sink.record(
            audit_entry(
                AuditAction.LOGOUT_ALL.value,
                "auth",
                client=client,
                actor_id=admin_id,
                details={"revoked_sessions": revoked},
            )
        )
        return revoked

    def verify_access_token(self, token: str | None) -> Principal:
        """Verify an access token (configured algorithm only) and return the principal.

        Raises:
            AuthenticationException: "Not authenticated" for any invalid token.
        """
        if not token:
            raise AuthenticationException(NOT_AUTHENTICATED_MESSAGE)
        try:
            payload = self.signer.verify(token, TOKEN_TYPE_ACCESS)
        except ValueError as e:
            logger.debug("Access token rejected: %s", e)
            raise AuthenticationException(NOT_AUTHENTICATED_MESSAGE) from None
        role = payload.get("role")
        email = payload.get("email")
        if not isinstance(role, str) or not isinstance(email, str):
            raise AuthenticationException(NOT_AUTHENTICATED_MESSAGE)
        return Principal(admin_id=payload["sub"], email=email, role=role)

    async def get_me(self, admin_id: str) -> AdminResult:
        admin = await self.admin_repo.get_by_id(admin_id)
        if admin is None:
            raise ResourceNotFoundException("admin", admin_id)
        return admin

    async def change_password(
        self,
        admin_id: str,
        current_password: str,
        new_password: str,
        client: ClientContext | None = None,
    ) -> None:
        """Replace the password after re-verifying the current one; revokes every session.

        Raises:
            AuthenticationException: Current password is wrong.
            ValidationException: New password too short or unchanged.
        """
        record = await self.admin_repo.get_auth_record_by_id(admin_id)
        if record is None:
            raise ResourceNotFoundException("admin", admin_id)
        if not await asyncio.to_thread(
            self.password_hasher.verify, current_password, record.hashed_password
        ):
            raise await self._fail(
                AuditAction.PASSWORD_CHANGE,
                "bad_password",
                client,
                actor_id=admin_id,
                email=record.email,
            )
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "new_password"
            )
        if new_password == current_password:
            raise ValidationException(
                "New password must differ from the current password", "new_password"
            )
        hashed = await asyncio.to_thread(self.password_hasher.hash, new_password)
        await self.admin_repo.update_password(admin_id, hashed)
        revoked = await self.refresh_repo.revoke_all_for_admin(admin_id, self.clock())
        await self.audit_sink.record(
            audit_entry(
                AuditAction.PASSWORD_CHANGE.value,
                "auth",
                client=client,
                actor_id=admin_id,
                details={"revoked_sessions": revoked},
            )
        )
