from __future__ import annotations

from celery import Celery

from src.config import settings


def make_celery() -> Celery:
    """Create the Celery app.

    Kept in a function so tests can build an eager app without touching the
    module-level instance.
    """

    celery = Celery(
        "expenses",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["src.worker.tasks"],
    )

    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        task_track_started=True,
        timezone="UTC",
        enable_utc=True,
    )

    return celery


celery_app = make_celery()
