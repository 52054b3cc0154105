from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.crud.expense_application import format_application_number, next_sequence_value
from src.models.expense_application import ExpenseApplication
from src.models.internal_category import InternalCategory
from src.models.member import Member
from src.services.subsidy import calculate_proposed_amount


def identity_headers(member: Member) -> dict[str, str]:
    return {"X-Member-Id": str(member.id), "X-Member-Role": member.role}


async def make_member(session: AsyncSession, *, role: str = "MEMBER", **overrides) -> Member:
    code = overrides.pop("member_code", f"M-{uuid.uuid4().hex[:8]}")
    member = Member(
        member_code=code,
        name=overrides.pop("name", f"Member {code}"),
        email=overrides.pop("email", f"{code.lower()}@example.com"),
        role=role,
        **overrides,
    )
    session.add(member)
    await session.commit()
    return member


async def make_category(session: AsyncSession, *, is_active: bool = True) -> InternalCategory:
    code = f"CAT-{uuid.uuid4().hex[:6]}"
    category = InternalCategory(code=code, name=f"Category {code}", is_active=is_active)
    session.add(category)
    await session.commit()
    return category


async def make_application(
    session: AsyncSession,
    *,
    member: Member,
    status: str = "DRAFT",
    amount: int = 10000,
    final_amount: int | None = None,
    approved_minutes_ago: int | None = None,
) -> ExpenseApplication:
    now = datetime.now(timezone.utc)
    app = ExpenseApplication(
        application_number=format_application_number(now, await next_sequence_value(session)),
        member_id=member.id,
        expense_date=date(2026, 4, 1),
        amount=amount,
        proposed_amount=calculate_proposed_amount(amount),
        final_amount=final_amount,
        description="Train fare",
        status=status,
    )
    if status == "APPROVED":
        app.approved_at = now - timedelta(minutes=approved_minutes_ago or 0)
    session.add(app)
    await session.commit()
    return app
