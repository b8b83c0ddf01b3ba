from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

from academy.models.assessment import Question, QuestionType


@dataclass(frozen=True, slots=True)
class QuestionSnapshot:
    """The question as it stood when the answer was graded."""

    text: str
    type: QuestionType
    points: int
    position: int
    options: tuple[str, ...] = ()
    image_url: str | None = None

    @staticmethod
    def of(question: Question) -> QuestionSnapshot:
        return QuestionSnapshot(
            text=question.text,
            type=question.type,
            points=question.points,
            position=question.position,
            options=question.options,
            image_url=question.image_url,
        )


@dataclass(frozen=True, slots=True)
class ResultAnswer:
    question_id: UUID | None
    student_answer: str
    correct_answer: str
    is_correct: bool
    points_earned: int
    question: QuestionSnapshot


@dataclass(frozen=True, slots=True)
class Result:
    """One submission attempt.  Immutable once stored."""

    id: UUID
    student_id: str
    assessment_id: UUID
    score: int
    total_points: int
    percentage: float
    attempt_number: int
    submitted_at: int
    answers: tuple[ResultAnswer, ...] = ()

    @staticmethod
    def new(
        *,
        student_id: str,
        assessment_id: UUID,
        score: int,
        total_points: int,
        percentage: float,
        attempt_number: int,
        submitted_at: int,
        answers: tuple[ResultAnswer, ...],
    ) -> Result:
        return Result(
            id=uuid4(),
            student_id=student_id,
            assessment_id=assessment_id,
            score=score,
            total_points=total_points,
            percentage=percentage,
            attempt_number=attempt_number,
            submitted_at=submitted_at,
            answers=answers,
        )
