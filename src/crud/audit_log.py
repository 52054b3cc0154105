from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.audit_log import AuditLog


def record_audit(
    session: AsyncSession,
    *,
    actor_id: UUID | None,
    entity_type: str,
    entity_id: Any,
    action: str,
    old_value: dict | None = None,
    new_value: dict | None = None,
    change_summary: str | None = None,
) -> AuditLog:
    audit = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        old_value=old_value,
        new_value=new_value,
        change_summary=change_summary,
    )
    session.add(audit)
    return audit
