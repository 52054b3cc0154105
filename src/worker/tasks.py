from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from src.config import settings
from src.services.notifications import deliver_submission_notice
from src.worker.celery_app import celery_app


logger = logging.getLogger("expenses.worker")


async def _deliver(application_id: UUID) -> int:
    # Each task runs in its own event loop; pooled connections would outlive it.
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    session_maker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    try:
        async with session_maker() as session:
            rows = await deliver_submission_notice(session, application_id=application_id)
    finally:
        await engine.dispose()
    return len(rows)


@celery_app.task(name="expenses.notify_application_submitted")
def notify_application_submitted(application_id: str) -> int:
    """Email the active administrators about a submission.

    Returns the number of notification log rows written.
    """

    logger.info("notify_application_submitted received application_id=%s", application_id)
    return asyncio.run(_deliver(UUID(application_id)))
