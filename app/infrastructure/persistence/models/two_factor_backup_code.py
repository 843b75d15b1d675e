"""Single-use 2FA backup code. Only the keyed hash is stored; used_at marks consumption."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class TwoFactorBackupCode(CuidMixin, CreatedAtMixin, Base):
    __tablename__ = "two_factor_backup_code"

    admin_id: Mapped[str] = mapped_column(
        String, ForeignKey("admin.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("admin_id", "code_hash", name="uq_backup_code_admin_hash"),
    )
