"""Courses, chapters, chapter progress and the ordered content listing.

  GET   /v1/courses                                          published (staff: all)
  POST  /v1/courses                                          staff
  PATCH /v1/courses/{course_id}/publish                      staff
  GET   /v1/courses/{course_id}/content                      chapters + quizzes + homeworks
  POST  /v1/courses/{course_id}/chapters                     staff
  PATCH /v1/chapters/{chapter_id}/publish                    staff
  GET   /v1/courses/{course_id}/progress                     caller's completion share
  PUT   /v1/courses/{course_id}/chapters/{chapter_id}/progress
  DELETE (same path)
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel

from academy.api.dependencies import CurrentUser, OptionalUser, RepoBundle, StaffUser
from academy.models.course import Chapter, Course
from academy.services import course_content, courses
from academy.services.errors import ForbiddenError, NotFoundError, PositionConflictError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["courses"])


class CourseIn(BaseModel):
    title: str
    description: str | None = None


class CourseOut(BaseModel):
    id: str
    title: str
    description: str | None
    is_published: bool
    created_by: str
    created_at: int


class ChapterIn(BaseModel):
    title: str
    position: int | None = None


class ChapterOut(BaseModel):
    id: str
    course_id: str
    title: str
    position: int
    is_published: bool


class PublishIn(BaseModel):
    is_published: bool


class ProgressOut(BaseModel):
    chapter_id: str
    is_completed: bool


class CourseProgressOut(BaseModel):
    completed: int
    total: int
    percentage: float


class ResultSummaryOut(BaseModel):
    id: str
    score: int
    total_points: int
    percentage: float
    attempt_number: int


class ContentItemOut(BaseModel):
    id: str
    title: str
    position: int
    type: str
    is_completed: bool | None = None
    max_attempts: int | None = None
    timer_minutes: int | None = None
    results: list[ResultSummaryOut] | None = None


def _course_out(c: Course) -> CourseOut:
    return CourseOut(
        id=str(c.id),
        title=c.title,
        description=c.description,
        is_published=c.is_published,
        created_by=c.created_by,
        created_at=c.created_at,
    )


def _chapter_out(ch: Chapter) -> ChapterOut:
    return ChapterOut(
        id=str(ch.id),
        course_id=str(ch.course_id),
        title=ch.title,
        position=ch.position,
        is_published=ch.is_published,
    )


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# --- Courses ---------------------------------------------------------------


@router.get("/v1/courses", response_model=list[CourseOut])
async def list_courses(viewer: OptionalUser, repos: RepoBundle) -> list[CourseOut]:
    return [_course_out(c) for c in await courses.list_courses(repos, viewer)]


@router.post(
    "/v1/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED
)
async def create_course(
    payload: CourseIn, principal: StaffUser, repos: RepoBundle
) -> CourseOut:
    try:
        course = await courses.create_course(
            repos, principal, title=payload.title, description=payload.description
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    return _course_out(course)


@router.patch("/v1/courses/{course_id}/publish", response_model=CourseOut)
async def publish_course(
    course_id: UUID, payload: PublishIn, _principal: StaffUser, repos: RepoBundle
) -> CourseOut:
    try:
        course = await courses.set_course_published(
            repos, course_id, payload.is_published
        )
    except NotFoundError as exc:
        raise _not_found(exc) from None
    return _course_out(course)


@router.get("/v1/courses/{course_id}/content", response_model=list[ContentItemOut])
async def get_content(
    course_id: UUID, viewer: OptionalUser, repos: RepoBundle, response: Response
) -> list[ContentItemOut]:
    try:
        items = await course_content.course_content(repos, course_id, viewer)
    except NotFoundError as exc:
        raise _not_found(exc) from None

    # per-viewer progress and scores must never be served from a cache
    response.headers["Cache-Control"] = "no-store"
    return [
        ContentItemOut(
            id=str(item.id),
            title=item.title,
            position=item.position,
            type=item.type,
            is_completed=item.is_completed,
            max_attempts=item.max_attempts,
            timer_minutes=item.timer_minutes,
            results=(
                [
                    ResultSummaryOut(
                        id=str(r.id),
                        score=r.score,
                        total_points=r.total_points,
                        percentage=round(r.percentage, 2),
                        attempt_number=r.attempt_number,
                    )
                    for r in item.results
                ]
                if item.results is not None
                else None
            ),
        )
        for item in items
    ]


# --- Chapters --------------------------------------------------------------


@router.post(
    "/v1/courses/{course_id}/chapters",
    response_model=ChapterOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_chapter(
    course_id: UUID, payload: ChapterIn, _principal: StaffUser, repos: RepoBundle
) -> ChapterOut:
    try:
        chapter = await courses.create_chapter(
            repos, course_id, title=payload.title, position=payload.position
        )
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except PositionConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from None
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
    return _chapter_out(chapter)


@router.patch("/v1/chapters/{chapter_id}/publish", response_model=ChapterOut)
async def publish_chapter(
    chapter_id: UUID, payload: PublishIn, _principal: StaffUser, repos: RepoBundle
) -> ChapterOut:
    try:
        chapter = await courses.set_chapter_published(
            repos, chapter_id, payload.is_published
        )
    except NotFoundError as exc:
        raise _not_found(exc) from None
    return _chapter_out(chapter)


# --- Progress --------------------------------------------------------------


@router.put(
    "/v1/courses/{course_id}/chapters/{chapter_id}/progress",
    response_model=ProgressOut,
)
async def complete_chapter(
    course_id: UUID, chapter_id: UUID, principal: CurrentUser, repos: RepoBundle
) -> ProgressOut:
    try:
        progress = await courses.mark_completed(repos, principal, course_id, chapter_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ForbiddenError as exc:
        logger.warning(
            "Progress denied  chapter_id=%s user_id=%s", chapter_id, principal.user_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from None
    return ProgressOut(
        chapter_id=str(progress.chapter_id), is_completed=progress.is_completed
    )


@router.delete(
    "/v1/courses/{course_id}/chapters/{chapter_id}/progress",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def uncomplete_chapter(
    course_id: UUID, chapter_id: UUID, principal: CurrentUser, repos: RepoBundle
) -> Response:
    try:
        await courses.unmark_completed(repos, principal, course_id, chapter_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/v1/courses/{course_id}/progress", response_model=CourseProgressOut)
async def get_course_progress(
    course_id: UUID, principal: CurrentUser, repos: RepoBundle, response: Response
) -> CourseProgressOut:
    try:
        progress = await courses.course_progress(repos, principal, course_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from None

    response.headers["Cache-Control"] = "no-store"
    return CourseProgressOut(
        completed=progress.completed,
        total=progress.total,
        percentage=progress.percentage,
    )
