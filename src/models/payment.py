from __future__ import annotations

import uuid

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # unique: an application is paid at most once.
    application_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("expense_applications.id"), nullable=False, unique=True
    )
    batch_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)

    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING", server_default="PENDING")
    payment_date: Mapped[object | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
