from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.expense_application import ExpenseApplication
from src.models.member import Member
from src.models.payment import Payment


async def list_payments(
    session: AsyncSession,
    *,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Payment], int]:
    stmt = select(Payment)
    if status is not None:
        stmt = stmt.where(Payment.payment_status == status)

    total = int((await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one())

    stmt = (
        stmt.order_by(Payment.created_at.desc(), Payment.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    res = await session.execute(stmt)
    return list(res.scalars().all()), total


async def list_unpaid_approved(session: AsyncSession) -> list[tuple[ExpenseApplication, Member]]:
    """APPROVED applications without any payment row, oldest approval first."""

    has_payment = select(Payment.id).where(Payment.application_id == ExpenseApplication.id).exists()
    stmt = (
        select(ExpenseApplication, Member)
        .join(Member, Member.id == ExpenseApplication.member_id)
        .where(ExpenseApplication.status == "APPROVED")
        .where(~has_payment)
        .order_by(ExpenseApplication.approved_at.asc(), ExpenseApplication.id.asc())
    )
    res = await session.execute(stmt)
    return [(row[0], row[1]) for row in res.all()]


async def get_approved_applications(
    session: AsyncSession,
    *,
    application_ids: list[UUID],
) -> list[ExpenseApplication]:
    stmt = (
        select(ExpenseApplication)
        .where(ExpenseApplication.id.in_(application_ids))
        .where(ExpenseApplication.status == "APPROVED")
        .with_for_update()
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def application_ids_with_payments(session: AsyncSession, *, application_ids: list[UUID]) -> set[UUID]:
    stmt = select(Payment.application_id).where(Payment.application_id.in_(application_ids))
    res = await session.execute(stmt)
    return set(res.scalars().all())


async def bulk_insert_payments(session: AsyncSession, *, rows: list[dict]) -> None:
    """Single multi-row INSERT on the caller's transaction."""

    if rows:
        await session.execute(insert(Payment), rows)


async def find_batch_payments(
    session: AsyncSession,
    *,
    batch_id: str,
) -> list[tuple[Payment, ExpenseApplication, Member]]:
    stmt = (
        select(Payment, ExpenseApplication, Member)
        .join(ExpenseApplication, ExpenseApplication.id == Payment.application_id)
        .join(Member, Member.id == ExpenseApplication.member_id)
        .where(Payment.batch_id == batch_id)
        .order_by(Payment.created_at.asc(), ExpenseApplication.application_number.asc())
    )
    res = await session.execute(stmt)
    return [(row[0], row[1], row[2]) for row in res.all()]
