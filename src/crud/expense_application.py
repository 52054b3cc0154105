from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Delete, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.application_comment import ApplicationComment
from src.models.expense_application import ExpenseApplication
from src.models.number_sequence import NumberSequence
from src.models.ocr_result import OcrResult
from src.models.receipt import Receipt

APPLICATION_SEQUENCE = "expense_application"

# Deletion graph for an application, children before parent. Every table that
# references expense_applications (directly or through receipts) must appear
# here ahead of the application itself.
DELETION_ORDER: tuple[str, ...] = (
    OcrResult.__tablename__,
    Receipt.__tablename__,
    ApplicationComment.__tablename__,
    ExpenseApplication.__tablename__,
)


def format_application_number(when: datetime | date, sequence: int) -> str:
    """EXP-YYYYMM-NNNN. The sequence widens past four digits instead of wrapping."""

    return f"EXP-{when.year:04d}{when.month:02d}-{sequence:04d}"


async def next_sequence_value(session: AsyncSession, *, name: str = APPLICATION_SEQUENCE) -> int:
    stmt = select(NumberSequence).where(NumberSequence.name == name).with_for_update()
    counter = (await session.execute(stmt)).scalar_one_or_none()

    if counter is None:
        counter = NumberSequence(name=name, last_value=0)
        session.add(counter)

    counter.last_value = (counter.last_value or 0) + 1
    await session.flush()
    return counter.last_value


async def get_application(
    session: AsyncSession,
    *,
    application_id: UUID,
    for_update: bool = False,
) -> ExpenseApplication | None:
    stmt = select(ExpenseApplication).where(ExpenseApplication.id == application_id)
    if for_update:
        stmt = stmt.with_for_update()

    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def list_applications(
    session: AsyncSession,
    *,
    member_id: UUID | None = None,
    status: str | None = None,
    category_id: UUID | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[ExpenseApplication], int]:
    """Return (items, total), newest first."""

    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1 or page_size > 100:
        raise ValueError("page_size must be between 1 and 100")

    stmt = select(ExpenseApplication)

    if member_id is not None:
        stmt = stmt.where(ExpenseApplication.member_id == member_id)
    if status is not None:
        stmt = stmt.where(ExpenseApplication.status == status)
    if category_id is not None:
        stmt = stmt.where(ExpenseApplication.internal_category_id == category_id)
    if date_from is not None:
        stmt = stmt.where(ExpenseApplication.expense_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(ExpenseApplication.expense_date <= date_to)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = int((await session.execute(count_stmt)).scalar_one())

    stmt = (
        stmt.order_by(ExpenseApplication.created_at.desc(), ExpenseApplication.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    res = await session.execute(stmt)
    return list(res.scalars().all()), total


def deletion_statements(application_id: UUID) -> list[Delete]:
    """Build the cascade for one application following DELETION_ORDER."""

    receipt_ids = select(Receipt.id).where(Receipt.application_id == application_id)
    by_table: dict[str, Delete] = {
        OcrResult.__tablename__: delete(OcrResult).where(OcrResult.receipt_id.in_(receipt_ids)),
        Receipt.__tablename__: delete(Receipt).where(Receipt.application_id == application_id),
        ApplicationComment.__tablename__: delete(ApplicationComment).where(
            ApplicationComment.application_id == application_id
        ),
        ExpenseApplication.__tablename__: delete(ExpenseApplication).where(
            ExpenseApplication.id == application_id
        ),
    }
    return [by_table[name] for name in DELETION_ORDER]


async def delete_application_cascade(session: AsyncSession, *, application_id: UUID) -> None:
    """Run the cascade on the caller's transaction. Does not commit."""

    for stmt in deletion_statements(application_id):
        await session.execute(stmt.execution_options(synchronize_session=False))
