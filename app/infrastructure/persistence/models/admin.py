"""Admin ORM model: credentials, role and two-factor state."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Admin(CuidMixin, TimestampMixin, Base):
    """Administrative user. Email is stored lower-cased and unique.

    two_factor_secret holds Fernet ciphertext, never the base32 secret.
    two_factor_last_used_step is the last accepted TOTP time step (replay guard).
    """

    __tablename__ = "admin"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=text("'viewer'")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    two_factor_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    two_factor_secret: Mapped[str | None] = mapped_column(Text, nullable=True)
    two_factor_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    two_factor_last_used_step: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "role IN ('superadmin', 'admin', 'editor', 'viewer')", name="ck_admin_role"
        ),
        CheckConstraint(
            "NOT two_factor_enabled OR two_factor_confirmed_at IS NOT NULL",
            name="ck_admin_two_factor_confirmed",
        ),
    )
