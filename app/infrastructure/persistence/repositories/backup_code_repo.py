"""Backup-code repository: hashed single-use 2FA recovery codes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.two_factor_backup_code import TwoFactorBackupCode
from app.infrastructure.persistence.repositories.base import BaseRepository


class BackupCodeRepository(BaseRepository[TwoFactorBackupCode]):
    def __init__(self, db: AsyncSession, *, commit_writes: bool = True) -> None:
        super().__init__(db, TwoFactorBackupCode, commit_writes=commit_writes)

    async def replace_all(self, admin_id: str, code_hashes: list[str]) -> None:
        """Invalidate every previous code and store the new set in one commit."""
        await self.db.execute(
            delete(TwoFactorBackupCode).where(TwoFactorBackupCode.admin_id == admin_id)
        )
        self.db.add_all(
            TwoFactorBackupCode(admin_id=admin_id, code_hash=h) for h in code_hashes
        )
        await self.db.flush()
        await self._persist()

    async def consume(self, admin_id: str, code_hash: str, at: datetime) -> bool:
        """Mark the code used only if still unused; a concurrent second use updates 0 rows."""
        result = await self.db.execute(
            update(TwoFactorBackupCode)
            .where(TwoFactorBackupCode.admin_id == admin_id)
            .where(TwoFactorBackupCode.code_hash == code_hash)
            .where(TwoFactorBackupCode.used_at.is_(None))
            .values(used_at=at)
        )
        await self._persist()
        return result.rowcount == 1

    async def count_remaining(self, admin_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(TwoFactorBackupCode)
            .where(TwoFactorBackupCode.admin_id == admin_id)
            .where(TwoFactorBackupCode.used_at.is_(None))
        )
        return int(result.scalar_one())

    async def delete_all(self, admin_id: str) -> None:
        await self.db.execute(
            delete(TwoFactorBackupCode).where(TwoFactorBackupCode.admin_id == admin_id)
        )
        await self._persist()
