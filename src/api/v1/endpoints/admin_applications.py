from __future__ import annotations

from datetime import date
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_workflow_service, require_admin
from src.api.v1.endpoints.applications import build_detail, parse_application_id
from src.crud.expense_application import list_applications
from src.database import get_db
from src.errors import ValidationFailedError
from src.models.enums import ApplicationStatus
from src.schemas.application import (
    ApplicationDetail,
    ApplicationListResponse,
    ApplicationRead,
    ApproveRequest,
    CommentRequiredRequest,
    SubsidyRead,
)
from src.services.actor import Actor
from src.services.application_workflow import ApplicationWorkflowService
from src.services.subsidy import calculate_subsidy


router = APIRouter(prefix="/admin/applications", tags=["admin"])


@router.get("", response_model=ApplicationListResponse)
async def admin_list_applications_endpoint(
    status: ApplicationStatus | None = Query(None, description="Application status"),
    member_id: uuid.UUID | None = Query(None),
    category_id: uuid.UUID | None = Query(None, description="Internal category"),
    date_from: date | None = Query(None, description="Filter: expense_date >= date_from"),
    date_to: date | None = Query(None, description="Filter: expense_date <= date_to"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    _admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApplicationListResponse:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationFailedError("date_from must be <= date_to")

    items, total = await list_applications(
        session,
        member_id=member_id,
        status=status.value if status is not None else None,
        category_id=category_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    return ApplicationListResponse(
        items=[ApplicationRead.model_validate(i) for i in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{application_id}", response_model=ApplicationDetail)
async def admin_get_application_endpoint(
    application_id: str,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationDetail:
    app, comments = await workflow.get_detail(
        session, application_id=parse_application_id(application_id), actor=admin
    )
    return build_detail(app, comments)


@router.get("/{application_id}/subsidy", response_model=SubsidyRead)
async def subsidy_preview_endpoint(
    application_id: str,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> SubsidyRead:
    app, _ = await workflow.get_detail(session, application_id=parse_application_id(application_id), actor=admin)
    calc = calculate_subsidy(app.amount)
    return SubsidyRead(original_amount=calc.original_amount, proposed_amount=calc.proposed_amount)


@router.post("/{application_id}/approve", response_model=ApplicationRead)
async def approve_application_endpoint(
    application_id: str,
    payload: ApproveRequest,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.approve(
        session,
        application_id=parse_application_id(application_id),
        admin_id=admin.id,
        category_id=payload.internal_category_id,
        final_amount=payload.final_amount,
        comment=payload.comment,
    )
    return ApplicationRead.model_validate(app)


@router.post("/{application_id}/return", response_model=ApplicationRead)
async def return_application_endpoint(
    application_id: str,
    payload: CommentRequiredRequest,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.return_application(
        session,
        application_id=parse_application_id(application_id),
        admin_id=admin.id,
        comment=payload.comment,
    )
    return ApplicationRead.model_validate(app)


@router.post("/{application_id}/reject", response_model=ApplicationRead)
async def reject_application_endpoint(
    application_id: str,
    payload: CommentRequiredRequest,
    admin: Actor = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.reject(
        session,
        application_id=parse_application_id(application_id),
        admin_id=admin.id,
        comment=payload.comment,
    )
    return ApplicationRead.model_validate(app)
