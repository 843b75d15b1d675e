"""Base repository: generic lookups and the write-persistence policy."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, an add helper and a commit/flush policy.

    With commit_writes=True (default) every write is committed immediately,
    so security state changes survive a request that later fails. Pass
    commit_writes=False when the caller owns the transaction (integration tests).
    """

    def __init__(
        self, db: AsyncSession, model: type[ModelType], *, commit_writes: bool = True
    ) -> None:
        self.db = db
        self.model = model
        self.commit_writes = commit_writes

    async def _persist(self) -> None:
        """Commit or flush pending changes according to commit_writes."""
        if self.commit_writes:
            await self.db.commit()
        else:
            await self.db.flush()

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record and refresh server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._persist()
        return obj
