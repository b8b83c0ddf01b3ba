from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

AssessmentKind = Literal["quiz", "homework"]
QuestionType = Literal["MULTIPLE_CHOICE", "TRUE_FALSE", "SHORT_ANSWER"]

ASSESSMENT_KINDS: tuple[AssessmentKind, ...] = ("quiz", "homework")
QUESTION_TYPES: tuple[QuestionType, ...] = (
    "MULTIPLE_CHOICE",
    "TRUE_FALSE",
    "SHORT_ANSWER",
)


@dataclass(frozen=True, slots=True)
class Assessment:
    """A quiz or homework owned by a course.

    ``position`` shares one ordering space with the course's chapters and
    its other assessments.
    """

    id: UUID
    course_id: UUID
    kind: AssessmentKind
    title: str
    position: int
    created_at: int
    description: str | None = None
    is_published: bool = False
    max_attempts: int = 1
    timer_minutes: int | None = None

    @staticmethod
    def new(
        *,
        course_id: UUID,
        kind: AssessmentKind,
        title: str,
        position: int,
        created_at: int,
        description: str | None = None,
        max_attempts: int = 1,
        timer_minutes: int | None = None,
    ) -> Assessment:
        return Assessment(
            id=uuid4(),
            course_id=course_id,
            kind=kind,
            title=title,
            position=position,
            created_at=created_at,
            description=description,
            max_attempts=max_attempts,
            timer_minutes=timer_minutes,
        )


@dataclass(frozen=True, slots=True)
class Question:
    """A gradable question.

    For MULTIPLE_CHOICE, ``correct_answer`` is the literal option text and
    ``options`` holds the non-empty options in display order.  Other types
    carry no options.
    """

    id: UUID
    assessment_id: UUID
    type: QuestionType
    correct_answer: str
    points: int
    position: int
    text: str = ""
    options: tuple[str, ...] = ()
    image_url: str | None = None

    @staticmethod
    def new(
        *,
        assessment_id: UUID,
        type: QuestionType,
        correct_answer: str,
        points: int,
        position: int,
        text: str = "",
        options: tuple[str, ...] = (),
        image_url: str | None = None,
    ) -> Question:
        return Question(
            id=uuid4(),
            assessment_id=assessment_id,
            type=type,
            correct_answer=correct_answer,
            points=points,
            position=position,
            text=text,
            options=options,
            image_url=image_url,
        )
