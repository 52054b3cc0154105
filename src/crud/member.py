from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.crud.base import BaseCRUD
from src.models.member import Member

member_crud: BaseCRUD[Member] = BaseCRUD(Member)


async def list_active_admins(session: AsyncSession) -> list[Member]:
    stmt = (
        select(Member)
        .where(Member.role == "ADMIN", Member.is_active.is_(True))
        .order_by(Member.member_code.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())
