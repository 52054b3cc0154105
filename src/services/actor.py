from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from src.models.enums import MemberRole


@dataclass(frozen=True)
class Actor:
    """The caller as resolved by the identity layer."""

    id: UUID
    role: MemberRole

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN
