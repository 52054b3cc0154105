from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
import secrets
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.crud.audit_log import record_audit
from src.crud.payment import (
    application_ids_with_payments,
    bulk_insert_payments,
    find_batch_payments,
    get_approved_applications,
    list_payments,
    list_unpaid_approved,
)
from src.database import atomic
from src.errors import ConflictError, ValidationFailedError
from src.models.enums import PaymentStatus
from src.models.expense_application import ExpenseApplication
from src.models.member import Member
from src.models.payment import Payment
from src.schemas.payment import BatchResult, ReadyApplicationRead
from src.services.zengin import SenderProfile, TransferRecord, ZenginFileEncoder

logger = logging.getLogger("expenses.payments")

# Crockford-style base32 without the easily confused I, L, O, U.
_SUFFIX_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_SUFFIX_LENGTH = 4


def payable_amount(app: ExpenseApplication) -> int:
    """Amount actually transferred: the approved amount when set, else the claim."""

    return app.final_amount if app.final_amount is not None else app.amount


def generate_batch_id(now: datetime | None = None) -> str:
    """BATCH-YYYYMMDD-HHMMSS-XXXX.

    The random suffix keeps two batches generated within the same second
    distinct.
    """

    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"BATCH-{now:%Y%m%d-%H%M%S}-{suffix}"


@dataclass(frozen=True)
class BatchLine:
    payment: Payment
    application: ExpenseApplication
    member: Member


def transfer_record_for(app: ExpenseApplication, member: Member) -> TransferRecord:
    """Map a payee to a data record, falling back to the configured defaults."""

    return TransferRecord(
        recipient_name=member.account_holder_kana or member.name,
        bank_code=member.bank_code or settings.zengin_bank_code,
        branch_code=member.branch_code or settings.zengin_branch_code,
        account_type=member.account_type or settings.zengin_default_account_type,
        account_number=member.account_number or settings.zengin_default_account_number,
        amount=payable_amount(app),
    )


def default_sender_profile(transfer_date: date) -> SenderProfile:
    return SenderProfile(
        sender_code=settings.zengin_sender_code,
        sender_name=settings.zengin_sender_name,
        transfer_date=transfer_date,
        bank_code=settings.zengin_bank_code,
        branch_code=settings.zengin_branch_code,
    )


class PaymentBatchGenerator:
    """Groups approved applications into a payment batch and renders its file."""

    def __init__(self, *, encoder: ZenginFileEncoder | None = None) -> None:
        self._encoder = encoder or ZenginFileEncoder()

    async def list_ready(self, session: AsyncSession) -> list[ReadyApplicationRead]:
        rows = await list_unpaid_approved(session)
        return [
            ReadyApplicationRead(
                id=app.id,
                application_number=app.application_number,
                member_id=member.id,
                member_name=member.name,
                expense_date=app.expense_date,
                amount=app.amount,
                final_amount=app.final_amount,
                payable_amount=payable_amount(app),
                approved_at=app.approved_at,
            )
            for app, member in rows
        ]

    async def generate_batch(
        self,
        session: AsyncSession,
        *,
        application_ids: list[UUID],
        actor_id: UUID | None = None,
        now: datetime | None = None,
    ) -> BatchResult:
        """Create one PENDING payment per application under a fresh batch id.

        All-or-nothing: if any id is missing, not APPROVED or already paid, no
        payment row is written.
        """

        ids = list(dict.fromkeys(application_ids))
        if not ids:
            raise ValidationFailedError("application_ids must not be empty")

        async with atomic(session):
            apps = await get_approved_applications(session, application_ids=ids)
            if len(apps) != len(ids):
                raise ConflictError("Some applications are not found or not in APPROVED status")

            if await application_ids_with_payments(session, application_ids=ids):
                raise ConflictError("Some applications already have payment records")

            batch_id = generate_batch_id(now)
            total_amount = sum(payable_amount(app) for app in apps)

            await bulk_insert_payments(
                session,
                rows=[
                    {
                        "application_id": app.id,
                        "batch_id": batch_id,
                        "payment_status": PaymentStatus.PENDING.value,
                    }
                    for app in apps
                ],
            )
            record_audit(
                session,
                actor_id=actor_id,
                entity_type="payment_batch",
                entity_id=batch_id,
                action="generate",
                new_value={
                    "application_ids": [str(app.id) for app in apps],
                    "payment_count": len(apps),
                    "total_amount": total_amount,
                },
                change_summary=f"batch {batch_id} generated with {len(apps)} payments",
            )

        logger.info(
            "payment_batch_generated batch_id=%s payment_count=%s total_amount=%s",
            batch_id,
            len(apps),
            total_amount,
        )
        return BatchResult(batch_id=batch_id, payment_count=len(apps), total_amount=total_amount)

    async def find_by_batch_id(self, session: AsyncSession, *, batch_id: str) -> list[BatchLine]:
        rows = await find_batch_payments(session, batch_id=batch_id)
        return [BatchLine(payment=p, application=a, member=m) for p, a, m in rows]

    async def list_payments(
        self,
        session: AsyncSession,
        *,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Payment], int]:
        return await list_payments(session, status=status, page=page, page_size=page_size)

    def render_transfer_file(self, lines: list[BatchLine], *, transfer_date: date) -> bytes:
        records = [transfer_record_for(line.application, line.member) for line in lines]
        return self._encoder.encode(default_sender_profile(transfer_date), records)

    async def build_transfer_file(
        self,
        session: AsyncSession,
        *,
        batch_id: str,
        transfer_date: date | None = None,
    ) -> bytes | None:
        """Encoded Zengin file for a batch, or None when the batch has no payments."""

        lines = await self.find_by_batch_id(session, batch_id=batch_id)
        if not lines:
            return None

        content = self.render_transfer_file(lines, transfer_date=transfer_date or date.today())
        logger.info("transfer_file_built batch_id=%s records=%s bytes=%s", batch_id, len(lines), len(content))
        return content
