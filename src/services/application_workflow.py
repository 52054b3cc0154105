from __future__ import annotations

from datetime import datetime, timezone
import logging
from uuid import UUID

from anyio import to_thread
from sqlalchemy.ext.asyncio import AsyncSession

from src.crud.audit_log import record_audit
from src.crud.comment import add_comment, list_comments
from src.crud.expense_application import (
    delete_application_cascade,
    format_application_number,
    get_application,
    next_sequence_value,
)
from src.crud.internal_category import category_crud
from src.database import atomic
from src.errors import (
    ForbiddenError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from src.models.application_comment import ApplicationComment
from src.models.enums import ApplicationStatus, CommentType
from src.models.expense_application import ExpenseApplication
from src.schemas.application import ApplicationCreate, ApplicationUpdate
from src.services.actor import Actor
from src.services.notifications import NotificationSender, get_notification_sender
from src.services.status_transitions import is_valid_transition
from src.services.subsidy import calculate_proposed_amount

logger = logging.getLogger("expenses.workflow")

SUBMISSION_COMMENT = "Submitted for approval"
EDITABLE_STATUSES = frozenset({ApplicationStatus.DRAFT.value, ApplicationStatus.RETURNED.value})


def _snapshot(app: ExpenseApplication) -> dict:
    return {
        "status": app.status,
        "amount": app.amount,
        "final_amount": app.final_amount,
        "internal_category_id": str(app.internal_category_id) if app.internal_category_id else None,
    }


def _require_comment(comment: str | None, *, action: str) -> str:
    text = (comment or "").strip()
    if not text:
        raise ValidationFailedError(f"A comment is required when {action} an application")
    return text


class ApplicationWorkflowService:
    """Lifecycle operations on expense applications.

    Every mutation loads the row under lock and re-checks the transition inside
    the transaction that writes it, so a concurrent writer that committed first
    is always observed. Status change, comment and audit row commit together.
    """

    def __init__(self, *, notifier: NotificationSender | None = None) -> None:
        self._notifier = notifier or get_notification_sender()

    async def _load(self, session: AsyncSession, application_id: UUID, *, for_update: bool = True) -> ExpenseApplication:
        app = await get_application(session, application_id=application_id, for_update=for_update)
        if app is None:
            raise NotFoundError("Application not found")
        return app

    @staticmethod
    def _require_transition(app: ExpenseApplication, target: ApplicationStatus) -> None:
        if not is_valid_transition(app.status, target):
            raise InvalidStatusTransitionError(app.status, target.value)

    @staticmethod
    def _require_owner(app: ExpenseApplication, member_id: UUID, *, action: str) -> None:
        if app.member_id != member_id:
            raise ForbiddenError(f"Not authorized to {action} this application")

    # -- authoring -----------------------------------------------------------

    async def create(self, session: AsyncSession, *, member_id: UUID, payload: ApplicationCreate) -> ExpenseApplication:
        async with atomic(session):
            now = datetime.now(timezone.utc)
            sequence = await next_sequence_value(session)

            app = ExpenseApplication(
                application_number=format_application_number(now, sequence),
                member_id=member_id,
                expense_date=payload.expense_date,
                amount=payload.amount,
                proposed_amount=calculate_proposed_amount(payload.amount),
                description=payload.description,
                is_cash_payment=payload.is_cash_payment,
                status=ApplicationStatus.DRAFT.value,
            )
            session.add(app)
            await session.flush()

            record_audit(
                session,
                actor_id=member_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="create",
                new_value=_snapshot(app),
                change_summary=f"application {app.application_number} created",
            )

        return app

    async def update(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        member_id: UUID,
        payload: ApplicationUpdate,
    ) -> ExpenseApplication:
        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_owner(app, member_id, action="update")

            if app.status not in EDITABLE_STATUSES:
                raise InvalidStatusTransitionError(
                    app.status,
                    app.status,
                    "Can only update applications in DRAFT or RETURNED status",
                )

            before = _snapshot(app)
            data = payload.model_dump(exclude_unset=True)

            if data.get("expense_date") is not None:
                app.expense_date = data["expense_date"]
            if data.get("amount") is not None and data["amount"] != app.amount:
                app.amount = data["amount"]
                app.proposed_amount = calculate_proposed_amount(app.amount)
            if data.get("description") is not None:
                app.description = data["description"]
            if data.get("is_cash_payment") is not None:
                app.is_cash_payment = data["is_cash_payment"]

            await session.flush()
            record_audit(
                session,
                actor_id=member_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="update",
                old_value=before,
                new_value=_snapshot(app),
            )

        return app

    async def get_detail(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        actor: Actor,
    ) -> tuple[ExpenseApplication, list[ApplicationComment]]:
        app = await self._load(session, application_id, for_update=False)
        if not actor.is_admin:
            self._require_owner(app, actor.id, action="view")

        comments = await list_comments(session, application_id=app.id)
        return app, comments

    async def add_comment(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        actor: Actor,
        comment: str,
    ) -> ApplicationComment:
        text = _require_comment(comment, action="commenting on")

        async with atomic(session):
            app = await self._load(session, application_id, for_update=False)
            if not actor.is_admin:
                self._require_owner(app, actor.id, action="comment on")

            row = add_comment(
                session,
                application_id=app.id,
                author_id=actor.id,
                comment=text,
                comment_type=CommentType.GENERAL.value,
            )
            await session.flush()
            record_audit(
                session,
                actor_id=actor.id,
                entity_type="application_comment",
                entity_id=row.id,
                action="comment",
                new_value={"application_id": str(app.id), "comment_type": row.comment_type},
            )

        return row

    # -- lifecycle -----------------------------------------------------------

    async def submit(self, session: AsyncSession, *, application_id: UUID, member_id: UUID) -> ExpenseApplication:
        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_owner(app, member_id, action="submit")
            self._require_transition(app, ApplicationStatus.SUBMITTED)

            before = _snapshot(app)
            app.status = ApplicationStatus.SUBMITTED.value
            app.submitted_at = datetime.now(timezone.utc)

            add_comment(
                session,
                application_id=app.id,
                author_id=member_id,
                comment=SUBMISSION_COMMENT,
                comment_type=CommentType.SUBMISSION.value,
            )
            record_audit(
                session,
                actor_id=member_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="submit",
                old_value=before,
                new_value=_snapshot(app),
            )

        logger.info("application_submitted application_id=%s member_id=%s", app.id, member_id)
        await self._notify_submitted(app)
        return app

    async def approve(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        admin_id: UUID,
        category_id: UUID,
        final_amount: int,
        comment: str | None = None,
    ) -> ExpenseApplication:
        if isinstance(final_amount, bool) or not isinstance(final_amount, int) or final_amount < 0:
            raise ValidationFailedError("final_amount must be an integer of 0 or more")

        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_transition(app, ApplicationStatus.APPROVED)

            category = await category_crud.get(session, id=category_id)
            if category is None or not category.is_active:
                raise ValidationFailedError("Internal category not found or inactive")

            before = _snapshot(app)
            app.status = ApplicationStatus.APPROVED.value
            app.internal_category_id = category.id
            app.final_amount = final_amount
            app.approved_by_id = admin_id
            app.approved_at = datetime.now(timezone.utc)

            # Optional on approval, unlike return and reject.
            text = (comment or "").strip()
            if text:
                add_comment(
                    session,
                    application_id=app.id,
                    author_id=admin_id,
                    comment=text,
                    comment_type=CommentType.APPROVAL.value,
                )
            record_audit(
                session,
                actor_id=admin_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="approve",
                old_value=before,
                new_value=_snapshot(app),
            )

        logger.info(
            "application_approved application_id=%s admin_id=%s final_amount=%s",
            app.id,
            admin_id,
            final_amount,
        )
        return app

    async def return_application(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        admin_id: UUID,
        comment: str | None,
    ) -> ExpenseApplication:
        text = _require_comment(comment, action="returning")

        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_transition(app, ApplicationStatus.RETURNED)

            before = _snapshot(app)
            app.status = ApplicationStatus.RETURNED.value

            add_comment(
                session,
                application_id=app.id,
                author_id=admin_id,
                comment=text,
                comment_type=CommentType.RETURN.value,
            )
            record_audit(
                session,
                actor_id=admin_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="return",
                old_value=before,
                new_value=_snapshot(app),
                change_summary=text,
            )

        logger.info("application_returned application_id=%s admin_id=%s", app.id, admin_id)
        return app

    async def reject(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        admin_id: UUID,
        comment: str | None,
    ) -> ExpenseApplication:
        text = _require_comment(comment, action="rejecting")

        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_transition(app, ApplicationStatus.REJECTED)

            before = _snapshot(app)
            app.status = ApplicationStatus.REJECTED.value
            app.rejected_at = datetime.now(timezone.utc)

            add_comment(
                session,
                application_id=app.id,
                author_id=admin_id,
                comment=text,
                comment_type=CommentType.REJECTION.value,
            )
            record_audit(
                session,
                actor_id=admin_id,
                entity_type="expense_application",
                entity_id=app.id,
                action="reject",
                old_value=before,
                new_value=_snapshot(app),
                change_summary=text,
            )

        logger.info("application_rejected application_id=%s admin_id=%s", app.id, admin_id)
        return app

    async def remove(self, session: AsyncSession, *, application_id: UUID, member_id: UUID) -> None:
        async with atomic(session):
            app = await self._load(session, application_id)
            self._require_owner(app, member_id, action="delete")

            if app.status != ApplicationStatus.DRAFT:
                raise InvalidStatusTransitionError(
                    app.status,
                    "DELETED",
                    "Can only delete applications in DRAFT status",
                )

            before = _snapshot(app)
            number = app.application_number
            session.expunge(app)

            await delete_application_cascade(session, application_id=application_id)
            record_audit(
                session,
                actor_id=member_id,
                entity_type="expense_application",
                entity_id=application_id,
                action="delete",
                old_value=before,
                change_summary=f"application {number} deleted",
            )

        logger.info("application_deleted application_id=%s member_id=%s", application_id, member_id)

    async def _notify_submitted(self, app: ExpenseApplication) -> None:
        """Fire-and-forget: never raises, never retries."""

        try:
            result = await to_thread.run_sync(self._notifier.notify, app)
        except Exception:
            logger.exception("notify_failed application_id=%s", app.id)
            return

        if not result.success:
            logger.warning("notify_unsuccessful application_id=%s error=%s", app.id, result.error)
