from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    created_by: str
    created_at: int
    description: str | None = None
    is_published: bool = False

    @staticmethod
    def new(
        *,
        title: str,
        created_by: str,
        created_at: int,
        description: str | None = None,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title,
            created_by=created_by,
            created_at=created_at,
            description=description,
        )


@dataclass(frozen=True, slots=True)
class Chapter:
    id: UUID
    course_id: UUID
    title: str
    position: int
    is_published: bool = False

    @staticmethod
    def new(*, course_id: UUID, title: str, position: int) -> Chapter:
        return Chapter(id=uuid4(), course_id=course_id, title=title, position=position)


@dataclass(frozen=True, slots=True)
class ChapterProgress:
    user_id: str
    chapter_id: UUID
    is_completed: bool = True
