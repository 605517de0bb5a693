"""
Base Repository

Generic async SQLAlchemy data access shared by the concrete repositories.
Callers own the session; every write commits before returning.
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Row-level CRUD for one mapped class keyed by a string ``id``.

    Usage:
        class NoteRepository(BaseRepository[NoteRecord]):
            def __init__(self):
                super().__init__(NoteRecord)
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def _persist(self, session: AsyncSession, db_obj: ModelType) -> ModelType:
        # Commit, then reload so Python-side defaults are visible on the object
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def create(self, session: AsyncSession, data: dict[str, Any]) -> ModelType:
        """
        Insert a row built from ``data`` (column name -> value).

        Returns:
            The committed entity.
        """
        db_obj = self.model(**data)
        session.add(db_obj)
        return await self._persist(session, db_obj)

    async def get_by_id(self, session: AsyncSession, id: str) -> ModelType | None:
        """Row with primary key ``id``, or None."""
        stmt = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        return (await session.execute(stmt)).scalars().first()

    async def get_all(self, session: AsyncSession) -> Sequence[ModelType]:
        """Every row, in storage order."""
        return (await session.execute(select(self.model))).scalars().all()

    async def update(
        self,
        session: AsyncSession,
        db_obj: ModelType,
        data: dict[str, Any],
    ) -> ModelType:
        """Assign the given columns only; absent keys are left untouched."""
        for column, value in data.items():
            setattr(db_obj, column, value)
        return await self._persist(session, db_obj)

    async def delete(self, session: AsyncSession, db_obj: ModelType) -> None:
        """Hard delete. Pending statements on the session commit with it."""
        await session.delete(db_obj)
        await session.commit()
