from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from src.api.deps import get_payment_generator, require_admin
from src.database import get_db
from src.errors import NotFoundError
from src.models.enums import PaymentStatus
from src.schemas.payment import (
    BatchResult,
    GenerateBatchRequest,
    PaymentListResponse,
    PaymentRead,
    ReadyApplicationRead,
)
from src.services.actor import Actor
from src.services.payment_batch import PaymentBatchGenerator


router = APIRouter(prefix="/admin/payments", tags=["admin"])


@router.get("", response_model=PaymentListResponse)
async def list_payments_endpoint(
    status: PaymentStatus | None = Query(None, description="Payment status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    _admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    generator: PaymentBatchGenerator = Depends(get_payment_generator),
) -> PaymentListResponse:
    items, total = await generator.list_payments(
        session,
        status=status.value if status is not None else None,
        page=page,
        page_size=page_size,
    )
    return PaymentListResponse(
        items=[PaymentRead.model_validate(p) for p in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/ready", response_model=list[ReadyApplicationRead])
async def list_ready_endpoint(
    _admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    generator: PaymentBatchGenerator = Depends(get_payment_generator),
) -> list[ReadyApplicationRead]:
    return await generator.list_ready(session)


@router.post("/generate", response_model=BatchResult, status_code=status.HTTP_201_CREATED)
async def generate_batch_endpoint(
    payload: GenerateBatchRequest,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    generator: PaymentBatchGenerator = Depends(get_payment_generator),
) -> BatchResult:
    return await generator.generate_batch(session, application_ids=payload.application_ids, actor_id=admin.id)


@router.get("/{batch_id}/download")
async def download_batch_endpoint(
    batch_id: str,
    transfer_date: date | None = Query(None, description="Transfer date written to the header (default: today)"),
    _admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    generator: PaymentBatchGenerator = Depends(get_payment_generator),
) -> Response:
    lines = await generator.find_by_batch_id(session, batch_id=batch_id)
    if not lines:
        raise NotFoundError("Batch not found")

    # Encoding is CPU-bound; keep it off the event loop.
    content = await run_in_threadpool(
        generator.render_transfer_file, lines, transfer_date=transfer_date or date.today()
    )
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{batch_id}.dat"'},
    )
