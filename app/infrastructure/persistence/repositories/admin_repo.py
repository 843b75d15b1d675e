"""Admin repository. Interface methods return application DTOs."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.admin import AdminAuthRecord, AdminResult
from app.domain.exceptions import AdminAlreadyExistsException
from app.infrastructure.persistence.models.admin import Admin
from app.infrastructure.persistence.repositories.base import BaseRepository


def _admin_to_record(a: Admin) -> AdminAuthRecord:
    return AdminAuthRecord(
        id=a.id,
        email=a.email,
        name=a.name,
        role=a.role,
        is_active=a.is_active,
        hashed_password=a.hashed_password,
        two_factor_enabled=a.two_factor_enabled,
        two_factor_secret=a.two_factor_secret,
        two_factor_confirmed_at=a.two_factor_confirmed_at,
        two_factor_last_used_step=a.two_factor_last_used_step,
        created_at=a.created_at,
        last_login_at=a.last_login_at,
    )


def _admin_to_result(a: Admin) -> AdminResult:
    """Map ORM Admin to AdminResult (no password, no secret)."""
    return _admin_to_record(a).to_result()


class AdminRepository(BaseRepository[Admin]):
    """Admin account store keyed by id and lower-cased email."""

    def __init__(self, db: AsyncSession, *, commit_writes: bool = True) -> None:
        super().__init__(db, Admin, commit_writes=commit_writes)

    async def _get_by_email(self, email: str) -> Admin | None:
        result = await self.db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_auth_record_by_email(self, email: str) -> AdminAuthRecord | None:
        admin = await self._get_by_email(email)
        return _admin_to_record(admin) if admin else None

    async def get_auth_record_by_id(self, admin_id: str) -> AdminAuthRecord | None:
        admin = await super().get_by_id(admin_id)
        return _admin_to_record(admin) if admin else None

    async def get_by_id(self, admin_id: str) -> AdminResult | None:  # type: ignore[override]
        admin = await super().get_by_id(admin_id)
        return _admin_to_result(admin) if admin else None

    async def list_admins(self, skip: int = 0, limit: int = 100) -> list[AdminResult]:
        result = await self.db.execute(
            select(Admin).order_by(Admin.created_at).offset(skip).limit(limit)
        )
        return [_admin_to_result(a) for a in result.scalars().all()]

    async def create(
        self, email: str, hashed_password: str, name: str, role: str
    ) -> AdminResult:
        """Create admin. Raises AdminAlreadyExistsException if email is taken."""
        admin = Admin(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            name=name,
            role=role,
        )
        try:
            admin = await self._add(admin)
        except IntegrityError as e:
            await self.db.rollback()
            raise AdminAlreadyExistsException() from e
        return _admin_to_result(admin)

    async def update_password(self, admin_id: str, hashed_password: str) -> None:
        await self.db.execute(
            update(Admin).where(Admin.id == admin_id).values(hashed_password=hashed_password)
        )
        await self._persist()

    async def update_role(self, admin_id: str, role: str) -> AdminResult | None:
        admin = await super().get_by_id(admin_id)
        if admin is None:
            return None
        admin.role = role
        await self.db.flush()
        await self.db.refresh(admin)
        await self._persist()
        return _admin_to_result(admin)

    async def record_login(self, admin_id: str, at: datetime) -> None:
        await self.db.execute(update(Admin).where(Admin.id == admin_id).values(last_login_at=at))
        await self._persist()

    async def save_two_factor(
        self,
        admin_id: str,
        *,
        encrypted_secret: str | None,
        enabled: bool,
        confirmed_at: datetime | None,
    ) -> None:
        values: dict[str, Any] = {
            "two_factor_secret": encrypted_secret,
            "two_factor_enabled": enabled,
            "two_factor_confirmed_at": confirmed_at,
        }
        if not enabled:
            values["two_factor_last_used_step"] = None
        await self.db.execute(update(Admin).where(Admin.id == admin_id).values(**values))
        await self._persist()

    async def claim_totp_step(self, admin_id: str, step: int) -> bool:
        """Conditional UPDATE: only one concurrent caller can claim a given step."""
        result = await self.db.execute(
            update(Admin)
            .where(Admin.id == admin_id)
            .where(
                or_(
                    Admin.two_factor_last_used_step.is_(None),
                    Admin.two_factor_last_used_step < step,
                )
            )
            .values(two_factor_last_used_step=step)
        )
        await self._persist()
        return result.rowcount == 1
