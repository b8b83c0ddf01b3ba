"""PostgreSQL implementation of ResultRepo."""

from __future__ import annotations

import hashlib
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.options_codec import decode_options, encode_options
from academy.db.tables import ResultAnswerRow, ResultRow
from academy.models.result import QuestionSnapshot, Result, ResultAnswer


def _advisory_key(student_id: str, assessment_id: UUID) -> int:
    """Signed 64-bit key for pg_advisory_xact_lock."""
    digest = hashlib.blake2b(
        f"attempt:{student_id}:{assessment_id}".encode(), digest_size=8
    ).digest()
    return int.from_bytes(digest, "big", signed=True)


class PgResultRepo:
    """Satisfies the ResultRepo Protocol using PostgreSQL.

    The attempt lock is a transaction-scoped advisory lock: it is released
    when the request transaction commits or rolls back, not when the
    context manager exits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def attempt_lock(
        self, student_id: str, assessment_id: UUID
    ) -> AsyncIterator[None]:
        key = _advisory_key(student_id, assessment_id)
        await self._session.execute(select(func.pg_advisory_xact_lock(key)))
        yield

    async def count(self, student_id: str, assessment_id: UUID) -> int:
        stmt = select(func.count()).where(
            ResultRow.student_id == student_id,
            ResultRow.assessment_id == assessment_id,
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def add(self, result: Result) -> None:
        row = ResultRow(
            id=result.id,
            student_id=result.student_id,
            assessment_id=result.assessment_id,
            score=result.score,
            total_points=result.total_points,
            percentage=result.percentage,
            attempt_number=result.attempt_number,
            submitted_at=result.submitted_at,
        )
        answer_rows = [
            ResultAnswerRow(
                result_id=result.id,
                question_id=a.question_id,
                student_answer=a.student_answer,
                correct_answer=a.correct_answer,
                is_correct=a.is_correct,
                points_earned=a.points_earned,
                question_text=a.question.text,
                question_type=a.question.type,
                question_points=a.question.points,
                question_options=encode_options(a.question.options),
                question_image_url=a.question.image_url,
                question_position=a.question.position,
            )
            for a in result.answers
        ]
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
                self._session.add_all(answer_rows)
        except IntegrityError:
            raise ValueError("attempt number already recorded") from None

    async def get(self, result_id: UUID) -> Result | None:
        row = await self._session.get(ResultRow, result_id)
        if row is None:
            return None
        return (await self._hydrate([row]))[0]

    async def for_student(
        self, student_id: str, *, assessment_id: UUID | None = None
    ) -> list[Result]:
        stmt = (
            select(ResultRow)
            .where(ResultRow.student_id == student_id)
            .order_by(ResultRow.submitted_at, ResultRow.attempt_number)
        )
        if assessment_id is not None:
            stmt = stmt.where(ResultRow.assessment_id == assessment_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return await self._hydrate(list(rows))

    async def find(self, *, assessment_id: UUID | None = None) -> list[Result]:
        stmt = select(ResultRow).order_by(
            ResultRow.submitted_at, ResultRow.attempt_number
        )
        if assessment_id is not None:
            stmt = stmt.where(ResultRow.assessment_id == assessment_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return await self._hydrate(list(rows))

    async def delete_for_assessment(self, assessment_id: UUID) -> int:
        stmt = delete(ResultRow).where(ResultRow.assessment_id == assessment_id)
        result = await self._session.execute(stmt)
        return result.rowcount

    async def _hydrate(self, rows: list[ResultRow]) -> list[Result]:
        if not rows:
            return []
        stmt = (
            select(ResultAnswerRow)
            .where(ResultAnswerRow.result_id.in_([r.id for r in rows]))
            .order_by(ResultAnswerRow.question_position)
        )
        by_result: dict[UUID, list[ResultAnswer]] = defaultdict(list)
        for a in (await self._session.execute(stmt)).scalars().all():
            by_result[a.result_id].append(_row_to_answer(a))
        return [_row_to_result(r, by_result[r.id]) for r in rows]


def _row_to_answer(row: ResultAnswerRow) -> ResultAnswer:
    return ResultAnswer(
        question_id=row.question_id,
        student_answer=row.student_answer,
        correct_answer=row.correct_answer,
        is_correct=row.is_correct,
        points_earned=row.points_earned,
        question=QuestionSnapshot(
            text=row.question_text or "",
            type=row.question_type,  # type: ignore[arg-type]
            points=row.question_points,
            position=row.question_position,
            options=tuple(decode_options(row.question_options)),
            image_url=row.question_image_url,
        ),
    )


def _row_to_result(row: ResultRow, answers: list[ResultAnswer]) -> Result:
    return Result(
        id=row.id,
        student_id=row.student_id,
        assessment_id=row.assessment_id,
        score=row.score,
        total_points=row.total_points,
        percentage=row.percentage,
        attempt_number=row.attempt_number,
        submitted_at=row.submitted_at,
        answers=tuple(answers),
    )
