from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Purchase:
    """A student's enrollment in a course; grants access to its content."""

    user_id: str
    course_id: UUID
    created_at: int
    status: str = "active"  # active|revoked

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True, slots=True)
class PurchaseCode:
    """Single-use code that converts into a Purchase when redeemed."""

    id: UUID
    code: str
    course_id: UUID
    created_by: str
    created_at: int
    is_used: bool = False
    used_by: str | None = None
    used_at: int | None = None

    @staticmethod
    def new(
        *, code: str, course_id: UUID, created_by: str, created_at: int
    ) -> PurchaseCode:
        return PurchaseCode(
            id=uuid4(),
            code=code,
            course_id=course_id,
            created_by=created_by,
            created_at=created_at,
        )
