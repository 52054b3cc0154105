from __future__ import annotations

from dataclasses import dataclass
from email.message import EmailMessage
import logging
import smtplib
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.crud.expense_application import get_application
from src.crud.member import list_active_admins, member_crud
from src.models.expense_application import ExpenseApplication
from src.models.member import Member
from src.models.notification_log import NotificationLog

logger = logging.getLogger("expenses.notifications")


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    error: str | None = None


class NotificationSender(Protocol):
    def notify(self, application: ExpenseApplication) -> NotificationResult: ...


class LoggingNotificationSender:
    """Used when no broker is configured: records the event in the log only."""

    def notify(self, application: ExpenseApplication) -> NotificationResult:
        logger.info(
            "application_submitted application_id=%s application_number=%s",
            application.id,
            application.application_number,
        )
        return NotificationResult(success=True)


class CeleryNotificationSender:
    """Hands the notification to the worker; delivery happens out of process."""

    def notify(self, application: ExpenseApplication) -> NotificationResult:
        # Imported lazily so the API can start without a broker connection.
        from src.worker.dispatch import enqueue_submission_notification

        try:
            enqueue_submission_notification(application_id=application.id)
        except Exception as exc:
            return NotificationResult(success=False, error=str(exc))
        return NotificationResult(success=True)


def get_notification_sender() -> NotificationSender:
    if settings.celery_enabled:
        return CeleryNotificationSender()
    return LoggingNotificationSender()


def build_submission_email(application: ExpenseApplication, owner: Member) -> tuple[str, str]:
    subject = f"[Expenses] New expense application {application.application_number}"
    body = "\n".join(
        [
            "A new expense application has been submitted.",
            "",
            f"Application number: {application.application_number}",
            f"Applicant: {owner.name}",
            f"Amount: {application.amount:,}",
            f"Description: {application.description}",
            "",
            "Please review it from the administration screen.",
        ]
    )
    return subject, body


def send_email(recipients: list[str], subject: str, body: str) -> NotificationResult:
    if not settings.smtp_server:
        logger.warning("smtp_not_configured recipients=%d subject=%r", len(recipients), subject)
        return NotificationResult(success=False, error="SMTP server is not configured")

    msg = EmailMessage()
    msg["From"] = settings.notification_from_email
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_server, settings.smtp_port, timeout=30) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(msg, to_addrs=recipients)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("smtp_send_failed recipients=%d error=%s", len(recipients), exc)
        return NotificationResult(success=False, error=str(exc))

    return NotificationResult(success=True)


async def deliver_submission_notice(
    session: AsyncSession,
    *,
    application_id: UUID,
    sender=send_email,
) -> list[NotificationLog]:
    """Email every active administrator and log one row per recipient.

    Returns the log rows written. A vanished application or an empty admin list
    is not an error: there is nobody to notify.
    """

    application = await get_application(session, application_id=application_id)
    if application is None:
        logger.warning("notify_skipped reason=application_missing application_id=%s", application_id)
        return []

    admins = await list_active_admins(session)
    if not admins:
        logger.info("notify_skipped reason=no_admins application_id=%s", application_id)
        return []

    owner = await member_crud.get(session, id=application.member_id)
    subject, body = build_submission_email(application, owner)
    emails = [a.email for a in admins]
    result = sender(emails, subject, body)

    rows = [
        NotificationLog(
            application_id=application.id,
            kind="SUBMISSION",
            recipient_email=email,
            status="SENT" if result.success else "FAILED",
            error=result.error,
        )
        for email in emails
    ]
    session.add_all(rows)
    await session.commit()
    return rows
