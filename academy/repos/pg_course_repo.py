"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.tables import ChapterProgressRow, ChapterRow, CourseRow
from academy.models.course import Chapter, ChapterProgress, Course


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_course(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def list_courses(self, *, published_only: bool) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at)
        if published_only:
            stmt = stmt.where(CourseRow.is_published.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add_course(self, course: Course) -> None:
        row = CourseRow(
            id=course.id,
            title=course.title,
            description=course.description,
            is_published=course.is_published,
            created_by=course.created_by,
            created_at=course.created_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def set_course_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id)
            .values(is_published=is_published)
            .returning(CourseRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)

    async def get_chapter(self, chapter_id: UUID) -> Chapter | None:
        row = await self._session.get(ChapterRow, chapter_id)
        if row is None:
            return None
        return _row_to_chapter(row)

    async def list_chapters(
        self, course_id: UUID, *, published_only: bool
    ) -> list[Chapter]:
        stmt = (
            select(ChapterRow)
            .where(ChapterRow.course_id == course_id)
            .order_by(ChapterRow.position)
        )
        if published_only:
            stmt = stmt.where(ChapterRow.is_published.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_chapter(r) for r in rows]

    async def add_chapter(self, chapter: Chapter) -> None:
        row = ChapterRow(
            id=chapter.id,
            course_id=chapter.course_id,
            title=chapter.title,
            position=chapter.position,
            is_published=chapter.is_published,
        )
        self._session.add(row)
        await self._session.flush()

    async def set_chapter_published(
        self, chapter_id: UUID, is_published: bool
    ) -> Chapter | None:
        stmt = (
            update(ChapterRow)
            .where(ChapterRow.id == chapter_id)
            .values(is_published=is_published)
            .returning(ChapterRow)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_chapter(row)

    async def completed_chapters(
        self, user_id: str, chapter_ids: list[UUID]
    ) -> set[UUID]:
        if not chapter_ids:
            return set()
        stmt = select(ChapterProgressRow.chapter_id).where(
            ChapterProgressRow.user_id == user_id,
            ChapterProgressRow.chapter_id.in_(chapter_ids),
            ChapterProgressRow.is_completed.is_(True),
        )
        return set((await self._session.execute(stmt)).scalars().all())

    async def set_progress(self, progress: ChapterProgress) -> None:
        stmt = (
            insert(ChapterProgressRow)
            .values(
                user_id=progress.user_id,
                chapter_id=progress.chapter_id,
                is_completed=progress.is_completed,
            )
            .on_conflict_do_update(
                index_elements=["user_id", "chapter_id"],
                set_={"is_completed": progress.is_completed},
            )
        )
        await self._session.execute(stmt)

    async def delete_progress(self, user_id: str, chapter_id: UUID) -> bool:
        stmt = delete(ChapterProgressRow).where(
            ChapterProgressRow.user_id == user_id,
            ChapterProgressRow.chapter_id == chapter_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description,
        is_published=row.is_published,
        created_by=row.created_by,
        created_at=row.created_at,
    )


def _row_to_chapter(row: ChapterRow) -> Chapter:
    return Chapter(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        position=row.position,
        is_published=row.is_published,
    )
