from __future__ import annotations

from datetime import date
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_actor, get_workflow_service
from src.crud.expense_application import list_applications
from src.database import get_db
from src.errors import NotFoundError, ValidationFailedError
from src.models.enums import ApplicationStatus
from src.schemas.application import (
    ApplicationCreate,
    ApplicationDetail,
    ApplicationListResponse,
    ApplicationRead,
    ApplicationUpdate,
)
from src.schemas.comment import CommentCreate, CommentRead
from src.services.actor import Actor
from src.services.application_workflow import ApplicationWorkflowService


router = APIRouter(prefix="/applications", tags=["applications"])


def parse_application_id(application_id: str) -> uuid.UUID:
    try:
        # Keep it explicit to get a clean 404 for malformed UUIDs.
        return uuid.UUID(application_id)
    except ValueError:
        raise NotFoundError("Application not found")


def build_detail(app, comments) -> ApplicationDetail:
    payload = ApplicationRead.model_validate(app).model_dump()
    payload["comments"] = [CommentRead.model_validate(c) for c in comments]
    return ApplicationDetail(**payload)


@router.post("", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
async def create_application_endpoint(
    payload: ApplicationCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.create(session, member_id=actor.id, payload=payload)
    return ApplicationRead.model_validate(app)


@router.get("", response_model=ApplicationListResponse)
async def list_my_applications_endpoint(
    status: ApplicationStatus | None = Query(None, description="Application status"),
    date_from: date | None = Query(None, description="Filter: expense_date >= date_from"),
    date_to: date | None = Query(None, description="Filter: expense_date <= date_to"),
    category_id: uuid.UUID | None = Query(None, description="Internal category"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
) -> ApplicationListResponse:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationFailedError("date_from must be <= date_to")

    items, total = await list_applications(
        session,
        member_id=actor.id,
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
async def get_application_endpoint(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationDetail:
    app, comments = await workflow.get_detail(
        session, application_id=parse_application_id(application_id), actor=actor
    )
    return build_detail(app, comments)


@router.patch("/{application_id}", response_model=ApplicationRead)
async def patch_application_endpoint(
    application_id: str,
    payload: ApplicationUpdate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.update(
        session,
        application_id=parse_application_id(application_id),
        member_id=actor.id,
        payload=payload,
    )
    return ApplicationRead.model_validate(app)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application_endpoint(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> Response:
    """Hard-delete a DRAFT application together with its comments and receipts."""

    await workflow.remove(session, application_id=parse_application_id(application_id), member_id=actor.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{application_id}/submit", response_model=ApplicationRead)
async def submit_application_endpoint(
    application_id: str,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> ApplicationRead:
    app = await workflow.submit(session, application_id=parse_application_id(application_id), member_id=actor.id)
    return ApplicationRead.model_validate(app)


@router.post("/{application_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
    application_id: str,
    payload: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db),
    workflow: ApplicationWorkflowService = Depends(get_workflow_service),
) -> CommentRead:
    row = await workflow.add_comment(
        session,
        application_id=parse_application_id(application_id),
        actor=actor,
        comment=payload.comment,
    )
    return CommentRead.model_validate(row)
