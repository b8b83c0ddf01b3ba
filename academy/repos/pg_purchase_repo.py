"""PostgreSQL implementation of PurchaseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.tables import PurchaseCodeRow, PurchaseRow
from academy.models.purchase import Purchase, PurchaseCode


class PgPurchaseRepo:
    """Satisfies the PurchaseRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def has_purchase(self, user_id: str, course_id: UUID) -> bool:
        stmt = select(
            exists().where(
                PurchaseRow.user_id == user_id,
                PurchaseRow.course_id == course_id,
                PurchaseRow.status == "active",
            )
        )
        return bool((await self._session.execute(stmt)).scalar())

    async def purchased_course_ids(self, user_id: str) -> list[UUID]:
        stmt = select(PurchaseRow.course_id).where(
            PurchaseRow.user_id == user_id, PurchaseRow.status == "active"
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def add_purchase(self, purchase: Purchase) -> None:
        row = PurchaseRow(
            user_id=purchase.user_id,
            course_id=purchase.course_id,
            status=purchase.status,
            created_at=purchase.created_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ValueError("purchase already exists") from None

    async def add_codes(self, codes: list[PurchaseCode]) -> None:
        rows = [
            PurchaseCodeRow(
                id=c.id,
                code=c.code,
                course_id=c.course_id,
                created_by=c.created_by,
                created_at=c.created_at,
                is_used=c.is_used,
            )
            for c in codes
        ]
        try:
            async with self._session.begin_nested():
                self._session.add_all(rows)
        except IntegrityError:
            raise ValueError("code already exists") from None

    async def code_exists(self, code: str) -> bool:
        stmt = select(exists().where(PurchaseCodeRow.code == code))
        return bool((await self._session.execute(stmt)).scalar())

    async def get_code(self, code_id: UUID) -> PurchaseCode | None:
        row = await self._session.get(PurchaseCodeRow, code_id)
        if row is None:
            return None
        return _row_to_code(row)

    async def get_code_by_value(self, code: str) -> PurchaseCode | None:
        stmt = select(PurchaseCodeRow).where(PurchaseCodeRow.code == code)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_code(row)

    async def list_codes(
        self, *, course_id: UUID | None = None, created_by: str | None = None
    ) -> list[PurchaseCode]:
        stmt = select(PurchaseCodeRow).order_by(PurchaseCodeRow.created_at.desc())
        if course_id is not None:
            stmt = stmt.where(PurchaseCodeRow.course_id == course_id)
        if created_by is not None:
            stmt = stmt.where(PurchaseCodeRow.created_by == created_by)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_code(r) for r in rows]

    async def delete_code(self, code_id: UUID) -> bool:
        stmt = delete(PurchaseCodeRow).where(PurchaseCodeRow.id == code_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def mark_code_used(
        self, code_id: UUID, user_id: str, used_at: int
    ) -> PurchaseCode | None:
        """Conditional update; None when the code is gone or already used."""
        stmt = (
            update(PurchaseCodeRow)
            .where(PurchaseCodeRow.id == code_id)
            .where(PurchaseCodeRow.is_used.is_(False))
            .values(is_used=True, used_by=user_id, used_at=used_at)
            .returning(PurchaseCodeRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None  # concurrent redemption won the race
        return _row_to_code(row)


def _row_to_code(row: PurchaseCodeRow) -> PurchaseCode:
    return PurchaseCode(
        id=row.id,
        code=row.code,
        course_id=row.course_id,
        created_by=row.created_by,
        created_at=row.created_at,
        is_used=row.is_used,
        used_by=row.used_by,
        used_at=row.used_at,
    )
