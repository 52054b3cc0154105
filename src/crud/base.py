from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


TModel = TypeVar("TModel")


class BaseCRUD(Generic[TModel]):
    """Generic lookup helper for SQLAlchemy (async).

    Methods do NOT commit. Callers control transaction boundaries.
    """

    def __init__(self, model: type[TModel]) -> None:
        self.model = model

    async def get(self, session: AsyncSession, *, id: Any, for_update: bool = False) -> TModel | None:
        q = select(self.model).where(getattr(self.model, "id") == id)
        if for_update:
            # SQLite ignores FOR UPDATE; PostgreSQL holds the row lock until commit.
            q = q.with_for_update()

        r = await session.execute(q)
        return r.scalar_one_or_none()
