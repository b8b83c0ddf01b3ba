"""Automatic grading of a submission.

``grade`` is a pure function of the question set and the submitted
answers: no I/O, no clock, no randomness.  Persisting the outcome is the
caller's job.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from uuid import UUID

from academy.models.assessment import Question
from academy.models.result import QuestionSnapshot, ResultAnswer


@dataclass(frozen=True, slots=True)
class GradedSubmission:
    answers: tuple[ResultAnswer, ...]
    score: int
    total_points: int
    percentage: float


def is_correct(question: Question, submitted: str) -> bool:
    if question.type == "MULTIPLE_CHOICE":
        expected = question.correct_answer.strip()
        # the stored answer must still be one of the options
        valid = {opt.strip() for opt in question.options}
        return submitted.strip() == expected and expected in valid
    if question.type == "TRUE_FALSE":
        return submitted.lower() == question.correct_answer.lower()
    if question.type == "SHORT_ANSWER":
        return submitted.strip().lower() == question.correct_answer.strip().lower()
    return False


def grade(
    questions: Sequence[Question], answers: Mapping[UUID, str]
) -> GradedSubmission:
    """Grade every question; unanswered questions count as ``""``.

    Points are all-or-nothing per question.  ``percentage`` is 0 when the
    assessment carries no points at all.
    """
    graded: list[ResultAnswer] = []
    score = 0
    total = 0
    for q in sorted(questions, key=lambda q: q.position):
        submitted = answers.get(q.id, "")
        correct = is_correct(q, submitted)
        earned = q.points if correct else 0
        score += earned
        total += q.points
        graded.append(
            ResultAnswer(
                question_id=q.id,
                student_answer=submitted,
                correct_answer=q.correct_answer,
                is_correct=correct,
                points_earned=earned,
                question=QuestionSnapshot.of(q),
            )
        )

    percentage = (score / total) * 100 if total > 0 else 0.0
    return GradedSubmission(
        answers=tuple(graded),
        score=score,
        total_points=total,
        percentage=percentage,
    )
