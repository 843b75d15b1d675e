"""Two-factor service: TOTP enrolment, login-time verification, backup codes.

State rules live in TwoFactorCredentialEntity; this service adds the crypto
(secret generation, encryption at rest, code matching) and persistence.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from app.application.dtos.admin import AdminAuthRecord
from app.application.dtos.audit_log import audit_entry
from app.application.dtos.auth import ClientContext
from app.application.dtos.two_factor import (
    BackupCodesResult,
    TwoFactorSetupResult,
    TwoFactorStatus,
)
from app.application.interfaces.repositories import IAdminRepository, IBackupCodeRepository
from app.application.interfaces.services import IAuditSink
from app.domain.entities.two_factor import TwoFactorCredentialEntity
from app.domain.exceptions import AuthenticationException, ResourceNotFoundException
from app.infrastructure.security.encryption import SecretEncryptor
from app.infrastructure.security.tokens import TokenHasher
from app.infrastructure.security.totp import TOTP_DIGITS, TotpService
from app.shared.enums import AuditAction, SecurityEvent
from app.shared.telemetry.logging import get_logger, log_security_event
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_backup_code

logger = get_logger(__name__)

METHOD_TOTP = "totp"
METHOD_BACKUP_CODE = "backup_code"


@dataclass(frozen=True)
class TwoFactorConfig:
    backup_code_count: int = 10


def credential_from_record(record: AdminAuthRecord) -> TwoFactorCredentialEntity:
    return TwoFactorCredentialEntity(
        admin_id=record.id,
        encrypted_secret=record.two_factor_secret,
        enabled=record.two_factor_enabled,
        confirmed_at=record.two_factor_confirmed_at,
    )


def _looks_like_totp(code: str) -> bool:
    digits = code.strip().replace(" ", "")
    return len(digits) == TOTP_DIGITS and digits.isdigit()


class TwoFactorService:
    """Enrol, verify and disable TOTP second factors for admins."""

    def __init__(
        self,
        admin_repo: IAdminRepository,
        backup_code_repo: IBackupCodeRepository,
        totp: TotpService,
        encryptor: SecretEncryptor,
        token_hasher: TokenHasher,
        audit_sink: IAuditSink,
        config: TwoFactorConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.admin_repo = admin_repo
        self.backup_code_repo = backup_code_repo
        self.totp = totp
        self.encryptor = encryptor
        self.token_hasher = token_hasher
        self.audit_sink = audit_sink
        self.config = config or TwoFactorConfig()
        self.clock = clock

    async def _load(self, admin_id: str) -> AdminAuthRecord:
        record = await self.admin_repo.get_auth_record_by_id(admin_id)
        if record is None:
            raise ResourceNotFoundException("admin", admin_id)
        return record

    async def _issue_backup_codes(self, admin_id: str) -> list[str]:
        """Generate a fresh unique set, store only hashes (replacing any previous set)."""
        codes: list[str] = []
        hashes: set[str] = set()
        while len(codes) < self.config.backup_code_count:
            code = generate_backup_code()
            code_hash = self.token_hasher.hash_backup_code(code)
            if code_hash in hashes:
                continue
            hashes.add(code_hash)
            codes.append(code)
        await self.backup_code_repo.replace_all(
            admin_id, [self.token_hasher.hash_backup_code(c) for c in codes]
        )
        return codes

    async def _match_totp(self, record: AdminAuthRecord, code: str) -> bool:
        """Verify a TOTP code against the stored secret and claim its time step (no replay)."""
        if not record.two_factor_secret:
            return False
        try:
            secret = self.encryptor.decrypt(record.two_factor_secret)
        except ValueError:
            logger.error("Stored 2FA secret for admin %s could not be decrypted", record.id)
            return False
        step = self.totp.match_step(secret, code, self.clock())
        if step is None:
            return False
        return await self.admin_repo.claim_totp_step(record.id, step)

    async def _verify_code(self, record: AdminAuthRecord, code: str) -> str | None:
        """Return the method that verified the code, or None."""
        code = (code or "").strip()
        if not code:
            return None
        if _looks_like_totp(code):
            return METHOD_TOTP if await self._match_totp(record, code) else None
        code_hash = self.token_hasher.hash_backup_code(code)
        if await self.backup_code_repo.consume(record.id, code_hash, self.clock()):
            return METHOD_BACKUP_CODE
        return None

    async def get_status(self, admin_id: str) -> TwoFactorStatus:
        record = await self._load(admin_id)
        credential = credential_from_record(record)
        remaining = (
            await self.backup_code_repo.count_remaining(admin_id)
            if credential.gates_login
            else 0
        )
        return TwoFactorStatus(
            enabled=credential.gates_login,
            state=credential.state.value,
            confirmed_at=credential.confirmed_at,
            backup_codes_remaining=remaining,
        )

    async def begin_setup(
        self, admin_id: str, client: ClientContext | None = None
    ) -> TwoFactorSetupResult:
        """Generate a secret and store it encrypted in pending_setup. Does not gate login yet.

        Raises:
            TwoFactorStateException: If 2FA is already enabled.
        """
        record = await self._load(admin_id)
        credential = credential_from_record(record)
        secret = self.totp.generate_secret()
        credential.begin_setup(self.encryptor.encrypt(secret))
        await self.admin_repo.save_two_factor(
            admin_id,
            encrypted_secret=credential.encrypted_secret,
            enabled=False,
            confirmed_at=None,
        )
        uri = self.totp.provisioning_uri(secret, record.email)
        await self.audit_sink.record(
            audit_entry(
                AuditAction.TWO_FACTOR_SETUP.value, "two_factor", client=client, actor_id=admin_id
            )
        )
        return TwoFactorSetupResult(
            secret=secret,
            otpauth_url=uri,
            qr_code_data_uri=self.totp.qr_code_data_uri(uri),
        )

    async def confirm_setup(
        self, admin_id: str, code: str, client: ClientContext | None = None
    ) -> BackupCodesResult:
        """Verify a TOTP code for the pending secret, enable 2FA and return backup codes once.

        Raises:
            TwoFactorStateException: If setup was not initiated or 2FA is already enabled.
            AuthenticationException: If the code does not verify (stays pending_setup).
        """
        record = await self._load(admin_id)
        credential = credential_from_record(record)
        credential.require_pending_setup()
        if not _looks_like_totp(code or "") or not await self._match_totp(record, code):
            log_security_event(
                SecurityEvent.TWO_FACTOR_FAILED.value, admin_id=admin_id, stage="setup"
            )
            await self.audit_sink.record(
                audit_entry(
                    AuditAction.TWO_FACTOR_ENABLE.value,
                    "two_factor",
                    client=client,
                    actor_id=admin_id,
                    success=False,
                    error_message="Invalid verification code",
                )
            )
            raise AuthenticationException("Invalid verification code")
        credential.confirm(self.clock())
        codes = await self._issue_backup_codes(admin_id)
        await self.admin_repo.save_two_factor(
            admin_id,
            encrypted_secret=credential.encrypted_secret,
            enabled=True,
            confirmed_at=credential.confirmed_at,
        )
        log_security_event(SecurityEvent.TWO_FACTOR_SUCCESS.value, admin_id=admin_id, stage="setup")
        await self.audit_sink.record(
            audit_entry(
                AuditAction.TWO_FACTOR_ENABLE.value, "two_factor", client=client, actor_id=admin_id
            )
        )
        return BackupCodesResult(codes=codes)

    async def verify_for_login(self, record: AdminAuthRecord, code: str) -> str | None:
        """Verify a TOTP or backup code for a login that is awaiting its second factor.

        A backup code is consumed on success. Returns the method used, or None.
        Only an enabled (confirmed) credential can verify; a pending secret never does.
        """
        if not credential_from_record(record).gates_login:
            return None
        return await self._verify_code(record, code)

    async def disable(
        self, admin_id: str, code: str, client: ClientContext | None = None
    ) -> None:
        """Clear secret and backup codes after proof of possession (TOTP or backup code).

        Raises:
            TwoFactorStateException: If 2FA is not enabled.
            AuthenticationException: If the code does not verify.
        """
        record = await self._load(admin_id)
        credential = credential_from_record(record)
        credential.require_enabled()
        method = await self._verify_code(record, code)
        if method is None:
            log_security_event(
                SecurityEvent.TWO_FACTOR_FAILED.value, admin_id=admin_id, stage="disable"
            )
            await self.audit_sink.record(
                audit_entry(
                    AuditAction.TWO_FACTOR_DISABLE.value,
                    "two_factor",
                    client=client,
                    actor_id=admin_id,
                    success=False,
                    error_message="Invalid verification code",
                )
            )
            raise AuthenticationException("Invalid verification code")
        credential.clear()
        await self.admin_repo.save_two_factor(
            admin_id, encrypted_secret=None, enabled=False, confirmed_at=None
        )
        await self.backup_code_repo.delete_all(admin_id)
        log_security_event(
            SecurityEvent.TWO_FACTOR_SUCCESS.value, admin_id=admin_id, stage="disable", method=method
        )
        await self.audit_sink.record(
            audit_entry(
                AuditAction.TWO_FACTOR_DISABLE.value,
                "two_factor",
                client=client,
                actor_id=admin_id,
                details={"method": method},
            )
        )

    async def regenerate_backup_codes(
        self, admin_id: str, client: ClientContext | None = None
    ) -> BackupCodesResult:
        """Invalidate every previous backup code and return a fresh set once.

        Raises:
            TwoFactorStateException: If 2FA is not enabled.
        """
        record = await self._load(admin_id)
        credential_from_record(record).require_enabled()
        codes = await self._issue_backup_codes(admin_id)
        await self.audit_sink.record(
            audit_entry(
                AuditAction.BACKUP_CODES_REGENERATE.value,
                "two_factor",
                client=client,
                actor_id=admin_id,
            )
        )
        return BackupCodesResult(codes=codes)
