from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.application_comment import ApplicationComment


def add_comment(
    session: AsyncSession,
    *,
    application_id: UUID,
    author_id: UUID,
    comment: str,
    comment_type: str,
) -> ApplicationComment:
    """Stage a comment row on the session. Flushed with the caller's transaction."""

    row = ApplicationComment(
        application_id=application_id,
        author_id=author_id,
        comment=comment,
        comment_type=comment_type,
    )
    session.add(row)
    return row


async def list_comments(session: AsyncSession, *, application_id: UUID) -> list[ApplicationComment]:
    """Comment timeline, oldest first."""

    stmt = (
        select(ApplicationComment)
        .where(ApplicationComment.application_id == application_id)
        .order_by(ApplicationComment.created_at.asc(), ApplicationComment.id.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())
