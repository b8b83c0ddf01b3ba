from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from academy.models.course import Chapter, ChapterProgress, Course


class CourseRepo(Protocol):
    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def list_courses(self, *, published_only: bool) -> list[Course]: ...
    async def add_course(self, course: Course) -> None: ...
    async def set_course_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None: ...
    async def get_chapter(self, chapter_id: UUID) -> Chapter | None: ...
    async def list_chapters(
        self, course_id: UUID, *, published_only: bool
    ) -> list[Chapter]: ...
    async def add_chapter(self, chapter: Chapter) -> None: ...
    async def set_chapter_published(
        self, chapter_id: UUID, is_published: bool
    ) -> Chapter | None: ...
    async def completed_chapters(
        self, user_id: str, chapter_ids: list[UUID]
    ) -> set[UUID]: ...
    async def set_progress(self, progress: ChapterProgress) -> None: ...
    async def delete_progress(self, user_id: str, chapter_id: UUID) -> bool: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._chapters: dict[UUID, Chapter] = {}
        self._progress: dict[tuple[str, UUID], ChapterProgress] = {}

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def list_courses(self, *, published_only: bool) -> list[Course]:
        courses = sorted(self._courses.values(), key=lambda c: c.created_at)
        if published_only:
            return [c for c in courses if c.is_published]
        return courses

    async def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise ValueError("course already exists")
        self._courses[course.id] = course

    async def set_course_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None:
        c = self._courses.get(course_id)
        if c is None:
            return None
        updated = replace(c, is_published=is_published)
        self._courses[course_id] = updated
        return updated

    async def get_chapter(self, chapter_id: UUID) -> Chapter | None:
        return self._chapters.get(chapter_id)

    async def list_chapters(
        self, course_id: UUID, *, published_only: bool
    ) -> list[Chapter]:
        chapters = [
            ch
            for ch in self._chapters.values()
            if ch.course_id == course_id and (ch.is_published or not published_only)
        ]
        return sorted(chapters, key=lambda ch: ch.position)

    async def add_chapter(self, chapter: Chapter) -> None:
        if chapter.course_id not in self._courses:
            raise KeyError("course not found")
        self._chapters[chapter.id] = chapter

    async def set_chapter_published(
        self, chapter_id: UUID, is_published: bool
    ) -> Chapter | None:
        ch = self._chapters.get(chapter_id)
        if ch is None:
            return None
        updated = replace(ch, is_published=is_published)
        self._chapters[chapter_id] = updated
        return updated

    async def completed_chapters(
        self, user_id: str, chapter_ids: list[UUID]
    ) -> set[UUID]:
        return {
            cid
            for cid in chapter_ids
            if (p := self._progress.get((user_id, cid))) is not None and p.is_completed
        }

    async def set_progress(self, progress: ChapterProgress) -> None:
        self._progress[(progress.user_id, progress.chapter_id)] = progress

    async def delete_progress(self, user_id: str, chapter_id: UUID) -> bool:
        return self._progress.pop((user_id, chapter_id), None) is not None
