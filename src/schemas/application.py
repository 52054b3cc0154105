from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.schemas.comment import CommentRead


class ApplicationCreate(BaseModel):
    expense_date: date
    amount: int = Field(..., ge=1)
    description: str = Field(..., min_length=1, max_length=500)
    is_cash_payment: bool = False

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class ApplicationUpdate(BaseModel):
    expense_date: date | None = None
    amount: int | None = Field(None, ge=1)
    description: str | None = Field(None, min_length=1, max_length=500)
    is_cash_payment: bool | None = None

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("description must not be blank")
        return value


class ApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    application_number: str
    member_id: UUID

    expense_date: date
    amount: int
    proposed_amount: int | None
    final_amount: int | None

    status: str
    description: str
    is_cash_payment: bool

    internal_category_id: UUID | None
    approved_by_id: UUID | None

    submitted_at: datetime | None
    approved_at: datetime | None
    rejected_at: datetime | None

    created_at: datetime
    updated_at: datetime


class ApplicationDetail(ApplicationRead):
    comments: list[CommentRead] = Field(default_factory=list)


class ApplicationListResponse(BaseModel):
    items: list[ApplicationRead]
    total: int
    page: int
    page_size: int


class ApproveRequest(BaseModel):
    internal_category_id: UUID
    final_amount: int = Field(..., ge=0)
    comment: str | None = None


class CommentRequiredRequest(BaseModel):
    # Presence is enforced by the workflow service so a missing comment
    # reports VALIDATION_ERROR with a domain message.
    comment: str | None = None


class SubsidyRead(BaseModel):
    original_amount: int
    proposed_amount: int
