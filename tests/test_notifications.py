import uuid

import pytest
from sqlalchemy import select

from src.models.notification_log import NotificationLog
from src.services import notifications
from src.services.notifications import (
    CeleryNotificationSender,
    LoggingNotificationSender,
    NotificationResult,
    build_submission_email,
    deliver_submission_notice,
    get_notification_sender,
)
from tests._factories import make_application, make_member


def test_sender_selection_follows_settings(monkeypatch):
    monkeypatch.setattr(notifications.settings, "celery_enabled", False)
    assert isinstance(get_notification_sender(), LoggingNotificationSender)

    monkeypatch.setattr(notifications.settings, "celery_enabled", True)
    assert isinstance(get_notification_sender(), CeleryNotificationSender)


def test_celery_sender_reports_broker_failure(monkeypatch):
    from src.worker import dispatch

    def _boom(*, application_id):
        raise ConnectionError("redis unreachable")

    monkeypatch.setattr(dispatch, "enqueue_submission_notification", _boom)

    class _App:
        id = uuid.uuid4()

    result = CeleryNotificationSender().notify(_App())
    assert result.success is False
    assert "redis unreachable" in result.error


def test_celery_sender_enqueues_application_id(monkeypatch):
    from src.worker import dispatch

    called = {}

    def _fake_enqueue(*, application_id):
        called["application_id"] = application_id

    monkeypatch.setattr(dispatch, "enqueue_submission_notification", _fake_enqueue)

    class _App:
        id = uuid.uuid4()

    assert CeleryNotificationSender().notify(_App()).success is True
    assert called["application_id"] == _App.id


def test_send_email_without_smtp_server_fails_softly(monkeypatch):
    monkeypatch.setattr(notifications.settings, "smtp_server", None)

    result = notifications.send_email(["a@example.com"], "subject", "body")
    assert result.success is False


@pytest.mark.anyio
async def test_deliver_submission_notice_logs_one_row_per_admin(session):
    member = await make_member(session, name="Taro")
    await make_member(session, role="ADMIN", email="boss@example.com")
    await make_member(session, role="ADMIN", email="cfo@example.com")
    await make_member(session, role="ADMIN", email="gone@example.com", is_active=False)
    app = await make_application(session, member=member, status="SUBMITTED")

    sent = {}

    def _sender(recipients, subject, body):
        sent["recipients"] = sorted(recipients)
        sent["subject"] = subject
        return NotificationResult(success=True)

    rows = await deliver_submission_notice(session, application_id=app.id, sender=_sender)

    assert sent["recipients"] == ["boss@example.com", "cfo@example.com"]
    assert app.application_number in sent["subject"]
    assert {r.status for r in rows} == {"SENT"}

    stored = (await session.execute(select(NotificationLog))).scalars().all()
    assert sorted(r.recipient_email for r in stored) == ["boss@example.com", "cfo@example.com"]


@pytest.mark.anyio
async def test_failed_delivery_is_recorded(session):
    member = await make_member(session)
    await make_member(session, role="ADMIN")
    app = await make_application(session, member=member, status="SUBMITTED")

    rows = await deliver_submission_notice(
        session,
        application_id=app.id,
        sender=lambda recipients, subject, body: NotificationResult(success=False, error="550 rejected"),
    )

    assert [(r.status, r.error) for r in rows] == [("FAILED", "550 rejected")]


@pytest.mark.anyio
async def test_nothing_to_deliver_for_missing_application(session):
    assert await deliver_submission_notice(session, application_id=uuid.uuid4()) == []


def test_submission_email_mentions_applicant_and_amount():
    class _App:
        application_number = "EXP-202604-0007"
        amount = 12345
        description = "Taxi"

    class _Owner:
        name = "Hanako"

    subject, body = build_submission_email(_App(), _Owner())
    assert "EXP-202604-0007" in subject
    assert "Hanako" in body
    assert "12,345" in body
