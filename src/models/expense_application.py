from __future__ import annotations

from datetime import date
import uuid

import sqlalchemy as sa
from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class ExpenseApplication(Base):
    __tablename__ = "expense_applications"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_applications_amount_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    application_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("members.id"), nullable=False, index=True)

    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    proposed_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    final_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT", server_default="DRAFT", index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    is_cash_payment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=sa.false())

    internal_category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("internal_categories.id"), nullable=True
    )
    approved_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("members.id"), nullable=True)

    submitted_at: Mapped[object | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[object | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[object | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    # Optimistic lock: a concurrent writer that committed first makes our UPDATE match zero rows.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")

    __mapper_args__ = {"version_id_col": version}
