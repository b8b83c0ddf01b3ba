"""PostgreSQL implementation of AssessmentRepo."""

from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.options_codec import decode_options, encode_options
from academy.db.tables import AssessmentRow, QuestionRow
from academy.models.assessment import Assessment, AssessmentKind, Question


class PgAssessmentRepo:
    """Satisfies the AssessmentRepo Protocol using PostgreSQL.

    ``replace`` deletes and re-inserts the question rows inside the
    request transaction, so an edit is never observed half-applied.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, assessment_id: UUID) -> Assessment | None:
        row = await self._session.get(AssessmentRow, assessment_id)
        if row is None:
            return None
        return _row_to_assessment(row)

    async def find(
        self,
        *,
        course_ids: Collection[UUID] | None = None,
        kind: AssessmentKind | None = None,
        published_only: bool = False,
    ) -> list[Assessment]:
        stmt = select(AssessmentRow).order_by(
            AssessmentRow.course_id, AssessmentRow.position
        )
        if course_ids is not None:
            stmt = stmt.where(AssessmentRow.course_id.in_(list(course_ids)))
        if kind is not None:
            stmt = stmt.where(AssessmentRow.kind == kind)
        if published_only:
            stmt = stmt.where(AssessmentRow.is_published.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_assessment(r) for r in rows]

    async def questions(self, assessment_id: UUID) -> list[Question]:
        stmt = (
            select(QuestionRow)
            .where(QuestionRow.assessment_id == assessment_id)
            .order_by(QuestionRow.position)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(r) for r in rows]

    async def add(self, assessment: Assessment, questions: list[Question]) -> None:
        self._session.add(
            AssessmentRow(
                id=assessment.id,
                course_id=assessment.course_id,
                kind=assessment.kind,
                title=assessment.title,
                description=assessment.description,
                position=assessment.position,
                is_published=assessment.is_published,
                max_attempts=assessment.max_attempts,
                timer_minutes=assessment.timer_minutes,
                created_at=assessment.created_at,
            )
        )
        await self._session.flush()
        self._session.add_all([_question_to_row(q) for q in questions])
        await self._session.flush()

    async def replace(self, assessment: Assessment, questions: list[Question]) -> None:
        stmt = (
            update(AssessmentRow)
            .where(AssessmentRow.id == assessment.id)
            .values(
                title=assessment.title,
                description=assessment.description,
                position=assessment.position,
                max_attempts=assessment.max_attempts,
                timer_minutes=assessment.timer_minutes,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("assessment not found")

        await self._session.execute(
            delete(QuestionRow).where(QuestionRow.assessment_id == assessment.id)
        )
        self._session.add_all([_question_to_row(q) for q in questions])
        await self._session.flush()

    async def set_published(
        self, assessment_id: UUID, is_published: bool
    ) -> Assessment | None:
        stmt = (
            update(AssessmentRow)
            .where(AssessmentRow.id == assessment_id)
            .values(is_published=is_published)
            .returning(AssessmentRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_assessment(row)

    async def delete(self, assessment_id: UUID) -> bool:
        # questions, results and result answers go with it (ON DELETE CASCADE)
        stmt = delete(AssessmentRow).where(AssessmentRow.id == assessment_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _question_to_row(q: Question) -> QuestionRow:
    return QuestionRow(
        id=q.id,
        assessment_id=q.assessment_id,
        text=q.text,
        type=q.type,
        options=encode_options(q.options),
        correct_answer=q.correct_answer,
        points=q.points,
        image_url=q.image_url,
        position=q.position,
    )


def _row_to_question(row: QuestionRow) -> Question:
    return Question(
        id=row.id,
        assessment_id=row.assessment_id,
        type=row.type,  # type: ignore[arg-type]
        correct_answer=row.correct_answer,
        points=row.points,
        position=row.position,
        text=row.text or "",
        options=tuple(decode_options(row.options)),
        image_url=row.image_url,
    )


def _row_to_assessment(row: AssessmentRow) -> Assessment:
    return Assessment(
        id=row.id,
        course_id=row.course_id,
        kind=row.kind,  # type: ignore[arg-type]
        title=row.title,
        position=row.position,
        created_at=row.created_at,
        description=row.description,
        is_published=row.is_published,
        max_attempts=row.max_attempts,
        timer_minutes=row.timer_minutes,
    )
