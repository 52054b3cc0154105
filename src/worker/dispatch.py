from __future__ import annotations

from uuid import UUID


def enqueue_submission_notification(*, application_id: UUID) -> None:
    """Enqueue the admin email for a freshly submitted application.

    Raises whatever the broker raises; the caller decides whether that matters.
    """

    from src.worker.tasks import notify_application_submitted

    notify_application_submitted.delay(str(application_id))
