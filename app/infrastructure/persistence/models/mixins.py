"""Column mixins shared by the catalog tables.

Plain mapped_column() attributes on a mixin are copied onto each mapped
subclass, so no declared_attr is needed for these columns.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


def _db_now(**kwargs) -> Mapped[datetime]:
    """Timezone-aware column defaulting to the database clock."""
    return mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False, **kwargs)


class CuidMixin:
    """String CUID primary key, generated client side."""

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    """Insert time only; for rows that are never updated (sessions, backup codes)."""

    created_at: Mapped[datetime] = _db_now()


class TimestampMixin(CreatedAtMixin):
    updated_at: Mapped[datetime] = _db_now(onupdate=func.now())
