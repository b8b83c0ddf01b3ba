"""Ordered course content: chapters, quizzes and homeworks in one list.

Each source is already sorted by position, so the lists are merged with
``heapq.merge`` rather than concatenated and re-sorted.  Equal positions
come out chapter first, then quiz, then homework, and within one type in
the source's own order.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from academy.models.principal import Principal
from academy.models.result import Result
from academy.repos.registry import Repos
from academy.services.errors import NotFoundError

ContentType = Literal["chapter", "quiz", "homework"]

_TYPE_RANK: dict[str, int] = {"chapter": 0, "quiz": 1, "homework": 2}


@dataclass(frozen=True, slots=True)
class ResultSummary:
    id: UUID
    score: int
    total_points: int
    percentage: float
    attempt_number: int


@dataclass(frozen=True, slots=True)
class ContentItem:
    id: UUID
    title: str
    position: int
    type: ContentType
    is_completed: bool | None = None  # chapters, viewer only
    max_attempts: int | None = None
    timer_minutes: int | None = None
    results: tuple[ResultSummary, ...] | None = None  # assessments, viewer only


def _sort_key(item: ContentItem) -> tuple[int, int]:
    return (item.position, _TYPE_RANK[item.type])


def merge_content(*sources: list[ContentItem]) -> list[ContentItem]:
    """Stable k-way merge of position-sorted sources."""
    return list(heapq.merge(*sources, key=_sort_key))


def _summaries(results: list[Result]) -> tuple[ResultSummary, ...]:
    return tuple(
        ResultSummary(
            id=r.id,
            score=r.score,
            total_points=r.total_points,
            percentage=r.percentage,
            attempt_number=r.attempt_number,
        )
        for r in sorted(results, key=lambda r: r.attempt_number)
    )


async def course_content(
    repos: Repos, course_id: UUID, viewer: Principal | None = None
) -> list[ContentItem]:
    staff = viewer is not None and viewer.is_staff()
    course = await repos.courses.get_course(course_id)
    if course is None or (not course.is_published and not staff):
        raise NotFoundError("course not found")

    chapters = await repos.courses.list_chapters(course_id, published_only=True)
    assessments = await repos.assessments.find(
        course_ids=[course_id], published_only=True
    )

    completed: set[UUID] = set()
    by_assessment: dict[UUID, list[Result]] = {}
    if viewer is not None:
        completed = await repos.courses.completed_chapters(
            viewer.user_id, [ch.id for ch in chapters]
        )
        ids = {a.id for a in assessments}
        for r in await repos.results.for_student(viewer.user_id):
            if r.assessment_id in ids:
                by_assessment.setdefault(r.assessment_id, []).append(r)

    chapter_items = [
        ContentItem(
            id=ch.id,
            title=ch.title,
            position=ch.position,
            type="chapter",
            is_completed=(ch.id in completed) if viewer is not None else None,
        )
        for ch in chapters
    ]

    def assessment_items(kind: ContentType) -> list[ContentItem]:
        return [
            ContentItem(
                id=a.id,
                title=a.title,
                position=a.position,
                type=kind,
                max_attempts=a.max_attempts,
                timer_minutes=a.timer_minutes,
                results=(
                    _summaries(by_assessment.get(a.id, []))
                    if viewer is not None
                    else None
                ),
            )
            for a in assessments
            if a.kind == kind
        ]

    return merge_content(
        chapter_items, assessment_items("quiz"), assessment_items("homework")
    )
