from __future__ import annotations

from uuid import UUID

from fastapi import Depends, Header

from src.errors import ForbiddenError, UnauthorizedError
from src.models.enums import MemberRole
from src.services.actor import Actor
from src.services.application_workflow import ApplicationWorkflowService
from src.services.payment_batch import PaymentBatchGenerator


async def get_current_actor(
    x_member_id: str | None = Header(None),
    x_member_role: str | None = Header(None),
) -> Actor:
    """Resolve the caller from the identity headers set by the auth proxy."""

    if not x_member_id:
        raise UnauthorizedError("Missing X-Member-Id header")

    try:
        member_id = UUID(x_member_id)
    except ValueError:
        raise UnauthorizedError("Invalid X-Member-Id header")

    try:
        role = MemberRole((x_member_role or MemberRole.MEMBER.value).upper())
    except ValueError:
        raise UnauthorizedError("Invalid X-Member-Role header")

    return Actor(id=member_id, role=role)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise ForbiddenError("Administrator role required")
    return actor


def get_workflow_service() -> ApplicationWorkflowService:
    return ApplicationWorkflowService()


def get_payment_generator() -> PaymentBatchGenerator:
    return PaymentBatchGenerator()
