"""Admin account service: provisioning, listing and role changes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

from app.application.dtos.admin import AdminResult
from app.application.dtos.audit_log import audit_entry
from app.application.dtos.auth import ClientContext, Principal
from app.application.interfaces.repositories import IAdminRepository, IRefreshTokenRepository
from app.application.interfaces.services import IAuditSink
from app.application.services.auth_service import MIN_PASSWORD_LENGTH
from app.domain.enums import AdminRole
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.domain.value_objects import EmailAddress
from app.infrastructure.security.password import PasswordHasher
from app.shared.enums import AuditAction
from app.shared.utils.datetime import utc_now


def _validate_role(role: str) -> str:
    if role not in AdminRole.values():
        raise ValidationException(
            f"role must be one of: {', '.join(AdminRole.values())}", "role"
        )
    return role


class AdminService:
    """Create admins and change their roles. Caller authorization happens in the API layer."""

    def __init__(
        self,
        admin_repo: IAdminRepository,
        refresh_repo: IRefreshTokenRepository,
        password_hasher: PasswordHasher,
        audit_sink: IAuditSink,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.admin_repo = admin_repo
        self.refresh_repo = refresh_repo
        self.password_hasher = password_hasher
        self.audit_sink = audit_sink
        self.clock = clock

    async def create_admin(
        self, email: str, password: str, name: str, role: str = AdminRole.ADMIN.value
    ) -> AdminResult:
        """Provision an admin (used by scripts/create_admin.py).

        Raises:
            ValidationException: Bad email, short password or unknown role.
            AdminAlreadyExistsException: Email already registered.
        """
        try:
            normalized = EmailAddress(email).value
        except ValueError:
            raise ValidationException("Invalid email address", "email") from None
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "password"
            )
        hashed = await asyncio.to_thread(self.password_hasher.hash, password)
        return await self.admin_repo.create(
            email=normalized,
            hashed_password=hashed,
            name=name.strip() or normalized,
            role=_validate_role(role),
        )

    async def reset_password(self, email: str, new_password: str) -> AdminResult:
        """Operator password reset: set a new hash and revoke every session."""
        record = await self.admin_repo.get_auth_record_by_email(email.strip().lower())
        if record is None:
            raise ResourceNotFoundException("admin", email)
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "password"
            )
        hashed = await asyncio.to_thread(self.password_hasher.hash, new_password)
        await self.admin_repo.update_password(record.id, hashed)
        await self.refresh_repo.revoke_all_for_admin(record.id, self.clock())
        return record.to_result()

    async def list_admins(self, skip: int = 0, limit: int = 100) -> list[AdminResult]:
        return await self.admin_repo.list_admins(skip=skip, limit=limit)

    async def change_role(
        self,
        actor: Principal,
        admin_id: str,
        role: str,
        client: ClientContext | None = None,
    ) -> AdminResult:
        """Set another admin's role and revoke their sessions so the new role applies at once.

        Raises:
            ValidationException: Unknown role, or the actor tried to change their own role.
            ResourceNotFoundException: Target admin does not exist.
        """
        _validate_role(role)
        if admin_id == actor.admin_id:
            raise ValidationException("You cannot change your own role", "admin_id")
        existing = await self.admin_repo.get_by_id(admin_id)
        if existing is None:
            raise ResourceNotFoundException("admin", admin_id)
        updated = await self.admin_repo.update_role(admin_id, role)
        if updated is None:
            raise ResourceNotFoundException("admin", admin_id)
        revoked = await self.refresh_repo.revoke_all_for_admin(admin_id, self.clock())
        await self.audit_sink.record(
            audit_entry(
                AuditAction.ADMIN_ROLE_CHANGE.value,
                "admin",
                client=client,
                actor_id=actor.admin_id,
                resource_id=admin_id,
                details={
                    "old_role": existing.role,
                    "new_role": role,
                    "revoked_sessions": revoked,
                },
            )
        )
        return updated
