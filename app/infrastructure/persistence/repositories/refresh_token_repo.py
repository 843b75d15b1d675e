"""Refresh-session repository. Stores only the token hash; rotation uses compare-and-swap."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.auth import RefreshSessionRecord
from app.infrastructure.persistence.models.refresh_token import RefreshToken
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc
from app.shared.utils.generators import generate_cuid


def _row_to_record(row: RefreshToken) -> RefreshSessionRecord:
    return RefreshSessionRecord(
        id=row.id,
        admin_id=row.admin_id,
        family_id=row.family_id,
        token_hash=row.token_hash,
        expires_at=ensure_utc(row.expires_at),
        created_at=ensure_utc(row.created_at),
        revoked_at=ensure_utc(row.revoked_at),
        replaced_by_id=row.replaced_by_id,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
    )


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    def __init__(self, db: AsyncSession, *, commit_writes: bool = True) -> None:
        super().__init__(db, RefreshToken, commit_writes=commit_writes)

    async def create(
        self,
        *,
        admin_id: str,
        family_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
    ) -> RefreshSessionRecord:
        row = RefreshToken(
            id=session_id or generate_cuid(),
            admin_id=admin_id,
            family_id=family_id,
            token_hash=token_hash,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        row = await self._add(row)
        return _row_to_record(row)

    async def get_by_hash(self, token_hash: str) -> RefreshSessionRecord | None:
        result = await self.db.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        row = result.scalar_one_or_none()
        return _row_to_record(row) if row else None

    async def revoke_if_active(
        self, session_id: str, at: datetime, replaced_by_id: str | None = None
    ) -> bool:
        """UPDATE ... WHERE revoked_at IS NULL; concurrent rotations see rowcount 0."""
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == session_id)
            .where(RefreshToken.revoked_at.is_(None))
            .values(revoked_at=at, replaced_by_id=replaced_by_id)
        )
        await self._persist()
        return result.rowcount == 1

    async def revoke_family(self, family_id: str, at: datetime) -> int:
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.family_id == family_id)
            .where(RefreshToken.revoked_at.is_(None))
            .values(revoked_at=at)
        )
        await self._persist()
        return int(result.rowcount or 0)

    async def revoke_all_for_admin(self, admin_id: str, at: datetime) -> int:
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.admin_id == admin_id)
            .where(RefreshToken.revoked_at.is_(None))
            .values(revoked_at=at)
        )
        await self._persist()
        return int(result.rowcount or 0)

    async def delete_expired(self, before: datetime) -> int:
        result = await self.db.execute(
            delete(RefreshToken).where(RefreshToken.expires_at < before)
        )
        await self._persist()
        return int(result.rowcount or 0)
