from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Member(Base):
    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="MEMBER", server_default="MEMBER")

    # Payee account for transfer files. NULL falls back to the configured defaults.
    bank_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    branch_code: Mapped[str | None] = mapped_column(String(3), nullable=True)
    account_type: Mapped[str | None] = mapped_column(String(1), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(7), nullable=True)
    account_holder_kana: Mapped[str | None] = mapped_column(String(30), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=sa.true())
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )
