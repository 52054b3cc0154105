from __future__ import annotations

import asyncio
from dataclasses import dataclass
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config import settings
from src.models.internal_category import InternalCategory
from src.models.member import Member


@dataclass(frozen=True)
class SeedMemberSpec:
    member_code: str
    name: str
    email: str
    role: str
    account_holder_kana: str | None = None


@dataclass(frozen=True)
class SeedCategorySpec:
    code: str
    name: str
    description: str


@dataclass(frozen=True)
class SeedResult:
    admin_id: uuid.UUID
    member_ids: tuple[uuid.UUID, ...]
    category_ids: tuple[uuid.UUID, ...]


DEMO_MEMBERS: tuple[SeedMemberSpec, ...] = (
    SeedMemberSpec(member_code="ADM001", name="Demo Admin", email="admin@demo.local", role="ADMIN"),
    SeedMemberSpec(
        member_code="MEM001",
        name="Taro Yamada",
        email="taro@demo.local",
        role="MEMBER",
        account_holder_kana="ﾔﾏﾀﾞ ﾀﾛｳ",
    ),
    SeedMemberSpec(
        member_code="MEM002",
        name="Hanako Sato",
        email="hanako@demo.local",
        role="MEMBER",
        account_holder_kana="ｻﾄｳ ﾊﾅｺ",
    ),
)

DEMO_CATEGORIES: tuple[SeedCategorySpec, ...] = (
    SeedCategorySpec(code="TRAVEL", name="Travel", description="Train, bus and taxi fares."),
    SeedCategorySpec(code="BOOKS", name="Books", description="Books and learning material."),
    SeedCategorySpec(code="SUPPLIES", name="Supplies", description="Office supplies and small equipment."),
)


async def _get_or_create_member(session: AsyncSession, *, spec: SeedMemberSpec) -> Member:
    res = await session.execute(select(Member).where(Member.member_code == spec.member_code))
    member = res.scalar_one_or_none()

    if member is None:
        member = Member(
            member_code=spec.member_code,
            name=spec.name,
            email=spec.email,
            role=spec.role,
            account_holder_kana=spec.account_holder_kana,
            is_active=True,
        )
        session.add(member)
        await session.flush()
    else:
        # Ensure the demo members stay active and roles are as expected.
        member.is_active = True
        member.role = spec.role
        member.email = member.email or spec.email

    return member


async def _get_or_create_category(session: AsyncSession, *, spec: SeedCategorySpec) -> InternalCategory:
    res = await session.execute(select(InternalCategory).where(InternalCategory.code == spec.code))
    category = res.scalar_one_or_none()

    if category is None:
        category = InternalCategory(code=spec.code, name=spec.name, description=spec.description, is_active=True)
        session.add(category)
        await session.flush()
    else:
        category.is_active = True

    return category


async def seed_dev_data_async(database_url: str | None = None) -> SeedResult:
    engine = create_async_engine(database_url or settings.database_url, pool_pre_ping=True)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        async with session_maker() as session:
            async with session.begin():
                members = [await _get_or_create_member(session, spec=spec) for spec in DEMO_MEMBERS]
                categories = [await _get_or_create_category(session, spec=spec) for spec in DEMO_CATEGORIES]
    finally:
        await engine.dispose()

    admin = next(m for m in members if m.role == "ADMIN")
    return SeedResult(
        admin_id=admin.id,
        member_ids=tuple(m.id for m in members if m.role != "ADMIN"),
        category_ids=tuple(c.id for c in categories),
    )


def seed_dev_data(database_url: str | None = None) -> SeedResult:
    return asyncio.run(seed_dev_data_async(database_url))


def main() -> None:
    result = seed_dev_data()
    print(f"seeded admin={result.admin_id} members={len(result.member_ids)} categories={len(result.category_ids)}")


if __name__ == "__main__":
    main()
