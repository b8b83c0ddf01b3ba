from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from uuid import UUID

from academy.models.course import Chapter, ChapterProgress, Course
from academy.models.principal import Principal
from academy.repos.registry import Repos
from academy.services.authoring import resolve_position
from academy.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


async def create_course(
    repos: Repos, principal: Principal, *, title: str, description: str | None
) -> Course:
    title = title.strip()
    if not title:
        raise ValueError("title must be non-empty")
    course = Course.new(
        title=title,
        description=description,
        created_by=principal.user_id,
        created_at=_now(),
    )
    await repos.courses.add_course(course)
    logger.info("Course created  course_id=%s user_id=%s", course.id, principal.user_id)
    return course


async def list_courses(repos: Repos, viewer: Principal | None) -> list[Course]:
    staff = viewer is not None and viewer.is_staff()
    return await repos.courses.list_courses(published_only=not staff)


async def set_course_published(
    repos: Repos, course_id: UUID, is_published: bool
) -> Course:
    course = await repos.courses.set_course_published(course_id, is_published)
    if course is None:
        raise NotFoundError("course not found")
    return course


async def create_chapter(
    repos: Repos, course_id: UUID, *, title: str, position: int | None
) -> Chapter:
    title = title.strip()
    if not title:
        raise ValueError("title must be non-empty")
    if await repos.courses.get_course(course_id) is None:
        raise NotFoundError("course not found")
    chapter = Chapter.new(
        course_id=course_id,
        title=title,
        position=await resolve_position(repos, course_id, position),
    )
    await repos.courses.add_chapter(chapter)
    logger.info(
        "Chapter created  chapter_id=%s course_id=%s position=%d",
        chapter.id,
        course_id,
        chapter.position,
    )
    return chapter


async def set_chapter_published(
    repos: Repos, chapter_id: UUID, is_published: bool
) -> Chapter:
    chapter = await repos.courses.set_chapter_published(chapter_id, is_published)
    if chapter is None:
        raise NotFoundError("chapter not found")
    return chapter


async def _chapter_for(
    repos: Repos, principal: Principal, course_id: UUID, chapter_id: UUID
) -> Chapter:
    chapter = await repos.courses.get_chapter(chapter_id)
    if chapter is None or chapter.course_id != course_id:
        raise NotFoundError("chapter not found")
    if not principal.is_staff() and not await repos.purchases.has_purchase(
        principal.user_id, course_id
    ):
        raise ForbiddenError("course not purchased")
    return chapter


async def mark_completed(
    repos: Repos, principal: Principal, course_id: UUID, chapter_id: UUID
) -> ChapterProgress:
    chapter = await _chapter_for(repos, principal, course_id, chapter_id)
    progress = ChapterProgress(user_id=principal.user_id, chapter_id=chapter.id)
    await repos.courses.set_progress(progress)
    return progress


async def unmark_completed(
    repos: Repos, principal: Principal, course_id: UUID, chapter_id: UUID
) -> None:
    await _chapter_for(repos, principal, course_id, chapter_id)
    if not await repos.courses.delete_progress(principal.user_id, chapter_id):
        raise NotFoundError("progress not found")


@dataclass(frozen=True, slots=True)
class CourseProgress:
    completed: int
    total: int
    percentage: float


async def course_progress(
    repos: Repos, principal: Principal, course_id: UUID
) -> CourseProgress:
    """Share of published content the caller has finished.

    A chapter counts once it is marked completed; a quiz or homework counts
    once it has at least one stored attempt.  An empty course is 0%.
    """
    staff = principal.is_staff()
    course = await repos.courses.get_course(course_id)
    if course is None or (not course.is_published and not staff):
        raise NotFoundError("course not found")
    if not staff and not await repos.purchases.has_purchase(
        principal.user_id, course_id
    ):
        raise ForbiddenError("course not purchased")

    chapters = await repos.courses.list_chapters(course_id, published_only=True)
    assessments = await repos.assessments.find(
        course_ids=[course_id], published_only=True
    )
    done_chapters = await repos.courses.completed_chapters(
        principal.user_id, [ch.id for ch in chapters]
    )
    published_ids = {a.id for a in assessments}
    attempted = {
        r.assessment_id
        for r in await repos.results.for_student(principal.user_id)
        if r.assessment_id in published_ids
    }

    total = len(chapters) + len(assessments)
    completed = len(done_chapters) + len(attempted)
    percentage = round(completed / total * 100, 2) if total else 0.0
    return CourseProgress(completed=completed, total=total, percentage=percentage)
