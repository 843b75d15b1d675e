"""Quote request repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.quote import QuoteCreate, QuoteResult
from app.infrastructure.persistence.models.quote_request import QuoteRequest
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc


def _row_to_result(row: QuoteRequest) -> QuoteResult:
    return QuoteResult(
        id=row.id,
        reference=row.reference,
        name=row.name,
        email=row.email,
        phone=row.phone,
        company=row.company,
        whatsapp=row.whatsapp,
        product_name=row.product_name,
        quantity=row.quantity,
        project_details=row.project_details,
        status=row.status,
        created_at=ensure_utc(row.created_at),
    )


class QuoteRepository(BaseRepository[QuoteRequest]):
    def __init__(self, db: AsyncSession, *, commit_writes: bool = True) -> None:
        super().__init__(db, QuoteRequest, commit_writes=commit_writes)

    async def create(self, data: QuoteCreate) -> QuoteResult:
        row = QuoteRequest(
            reference=data.reference,
            name=data.name,
            company=data.company,
            email=data.email,
            phone=data.phone,
            whatsapp=data.whatsapp,
            product_name=data.product_name,
            quantity=data.quantity,
            project_details=data.project_details,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
        )
        row = await self._add(row)
        return _row_to_result(row)

    async def list(
        self, *, skip: int = 0, limit: int = 50, status: str | None = None
    ) -> tuple[list[QuoteResult], int]:
        conditions: list[Any] = []
        if status is not None:
            conditions.append(QuoteRequest.status == status)
        total = await self.db.scalar(
            select(func.count()).select_from(QuoteRequest).where(*conditions)
        )
        result = await self.db.execute(
            select(QuoteRequest)
            .where(*conditions)
            .order_by(QuoteRequest.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_row_to_result(r) for r in result.scalars().all()], int(total or 0)
