from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GenerateBatchRequest(BaseModel):
    # Emptiness is checked by the generator so the error carries its own code.
    application_ids: list[UUID] = Field(default_factory=list)


class BatchResult(BaseModel):
    # Serialized as batchId, paymentCount, totalAmount.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    batch_id: str
    payment_count: int
    total_amount: int


class ReadyApplicationRead(BaseModel):
    id: UUID
    application_number: str
    member_id: UUID
    member_name: str
    expense_date: date
    amount: int
    final_amount: int | None
    payable_amount: int
    approved_at: datetime | None


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_id: UUID
    batch_id: str
    payment_status: str
    payment_date: datetime | None
    created_at: datetime


class PaymentListResponse(BaseModel):
    items: list[PaymentRead]
    total: int
    page: int
    page_size: int
