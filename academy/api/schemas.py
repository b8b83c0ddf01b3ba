"""Response schemas shared by the student and staff result routes."""

from __future__ import annotations

from pydantic import BaseModel

from academy.models.assessment import Question
from academy.models.result import Result, ResultAnswer


class QuestionSnapshotOut(BaseModel):
    text: str
    type: str
    points: int
    position: int
    options: list[str]
    image_url: str | None


class AnswerOut(BaseModel):
    question_id: str | None
    student_answer: str
    correct_answer: str
    is_correct: bool
    points_earned: int
    question: QuestionSnapshotOut


class ResultOut(BaseModel):
    id: str
    student_id: str
    assessment_id: str
    score: int
    total_points: int
    percentage: float
    attempt_number: int
    submitted_at: int
    answers: list[AnswerOut]


class QuestionOut(BaseModel):
    """A question as students see it: no correct answer."""

    id: str
    text: str
    type: str
    options: list[str]
    points: int
    image_url: str | None
    position: int


class StaffQuestionOut(QuestionOut):
    correct_answer: str


def answer_out(a: ResultAnswer) -> AnswerOut:
    q = a.question
    return AnswerOut(
        question_id=str(a.question_id) if a.question_id else None,
        student_answer=a.student_answer,
        correct_answer=a.correct_answer,
        is_correct=a.is_correct,
        points_earned=a.points_earned,
        question=QuestionSnapshotOut(
            text=q.text,
            type=q.type,
            points=q.points,
            position=q.position,
            options=list(q.options),
            image_url=q.image_url,
        ),
    )


def result_out(r: Result) -> ResultOut:
    return ResultOut(
        id=str(r.id),
        student_id=r.student_id,
        assessment_id=str(r.assessment_id),
        score=r.score,
        total_points=r.total_points,
        percentage=round(r.percentage, 2),
        attempt_number=r.attempt_number,
        submitted_at=r.submitted_at,
        answers=[
            answer_out(a) for a in sorted(r.answers, key=lambda a: a.question.position)
        ],
    )


def question_out(q: Question) -> QuestionOut:
    return QuestionOut(
        id=str(q.id),
        text=q.text,
        type=q.type,
        options=list(q.options),
        points=q.points,
        image_url=q.image_url,
        position=q.position,
    )


def staff_question_out(q: Question) -> StaffQuestionOut:
    return StaffQuestionOut(
        **question_out(q).model_dump(), correct_answer=q.correct_answer
    )
