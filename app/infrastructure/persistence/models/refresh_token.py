"""Refresh-session ORM model. Stored by token_hash; revoked_at marks rotation or logout."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class RefreshToken(CuidMixin, CreatedAtMixin, Base):
    """One refresh-token grant. family_id links every rotation descended from one login."""

    __tablename__ = "refresh_token"

    admin_id: Mapped[str] = mapped_column(
        String, ForeignKey("admin.id", ondelete="CASCADE"), nullable=False, index=True
    )
    family_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    replaced_by_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("ix_refresh_token_expires_at", "expires_at"),)
