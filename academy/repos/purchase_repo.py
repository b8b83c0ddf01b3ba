from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from academy.models.purchase import Purchase, PurchaseCode


class PurchaseRepo(Protocol):
    async def has_purchase(self, user_id: str, course_id: UUID) -> bool: ...
    async def purchased_course_ids(self, user_id: str) -> list[UUID]: ...
    async def add_purchase(self, purchase: Purchase) -> None: ...
    async def add_codes(self, codes: list[PurchaseCode]) -> None: ...
    async def code_exists(self, code: str) -> bool: ...
    async def get_code(self, code_id: UUID) -> PurchaseCode | None: ...
    async def get_code_by_value(self, code: str) -> PurchaseCode | None: ...
    async def list_codes(
        self, *, course_id: UUID | None = None, created_by: str | None = None
    ) -> list[PurchaseCode]: ...
    async def delete_code(self, code_id: UUID) -> bool: ...
    async def mark_code_used(
        self, code_id: UUID, user_id: str, used_at: int
    ) -> PurchaseCode | None: ...


class InMemoryPurchaseRepo:
    def __init__(self) -> None:
        self._purchases: dict[tuple[str, UUID], Purchase] = {}
        self._codes: dict[UUID, PurchaseCode] = {}

    async def has_purchase(self, user_id: str, course_id: UUID) -> bool:
        p = self._purchases.get((user_id, course_id))
        return p is not None and p.is_active

    async def purchased_course_ids(self, user_id: str) -> list[UUID]:
        return [
            p.course_id
            for (uid, _), p in self._purchases.items()
            if uid == user_id and p.is_active
        ]

    async def add_purchase(self, purchase: Purchase) -> None:
        key = (purchase.user_id, purchase.course_id)
        if key in self._purchases:
            raise ValueError("purchase already exists")
        self._purchases[key] = purchase

    async def add_codes(self, codes: list[PurchaseCode]) -> None:
        existing = {c.code for c in self._codes.values()}
        if any(c.code in existing for c in codes):
            raise ValueError("code already exists")
        for c in codes:
            self._codes[c.id] = c

    async def code_exists(self, code: str) -> bool:
        return any(c.code == code for c in self._codes.values())

    async def get_code(self, code_id: UUID) -> PurchaseCode | None:
        return self._codes.get(code_id)

    async def get_code_by_value(self, code: str) -> PurchaseCode | None:
        for c in self._codes.values():
            if c.code == code:
                return c
        return None

    async def list_codes(
        self, *, course_id: UUID | None = None, created_by: str | None = None
    ) -> list[PurchaseCode]:
        codes = [
            c
            for c in self._codes.values()
            if (course_id is None or c.course_id == course_id)
            and (created_by is None or c.created_by == created_by)
        ]
        return sorted(codes, key=lambda c: c.created_at, reverse=True)

    async def delete_code(self, code_id: UUID) -> bool:
        return self._codes.pop(code_id, None) is not None

    async def mark_code_used(
        self, code_id: UUID, user_id: str, used_at: int
    ) -> PurchaseCode | None:
        c = self._codes.get(code_id)
        if c is None or c.is_used:
            return None
        updated = replace(c, is_used=True, used_by=user_id, used_at=used_at)
        self._codes[code_id] = updated
        return updated
