"""Student-facing load and submit flow for quizzes and homeworks."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from academy.core.metrics import ASSESSMENT_SUBMISSIONS, GRADED_PERCENTAGE
from academy.models.assessment import Assessment, Question
from academy.models.principal import Principal
from academy.models.result import Result
from academy.repos.registry import Repos
from academy.services import attempt_gate, grading
from academy.services.attempt_gate import AttemptStatus
from academy.services.errors import (
    AttemptConflictError,
    AttemptLimitExceededError,
    ForbiddenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedAssessment:
    assessment: Assessment
    questions: list[Question]
    status: AttemptStatus


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


async def _resolve(
    repos: Repos, principal: Principal, assessment_id: UUID
) -> Assessment:
    """Find the assessment and check the caller may take it.

    Unpublished assessments are invisible to students; staff skip both the
    visibility and the purchase checks.
    """
    assessment = await repos.assessments.get(assessment_id)
    if assessment is None:
        raise NotFoundError("assessment not found")
    if principal.is_staff():
        return assessment
    if not assessment.is_published:
        raise NotFoundError("assessment not found")
    if not await repos.purchases.has_purchase(principal.user_id, assessment.course_id):
        raise ForbiddenError("course not purchased")
    return assessment


async def load_for_student(
    repos: Repos, principal: Principal, assessment_id: UUID
) -> LoadedAssessment:
    assessment = await _resolve(repos, principal, assessment_id)
    questions = await repos.assessments.questions(assessment.id)
    status = await attempt_gate.check(repos.results, principal.user_id, assessment)
    return LoadedAssessment(assessment=assessment, questions=questions, status=status)


def answer_map(pairs: Iterable[tuple[UUID, str]]) -> dict[UUID, str]:
    """First answer per question wins; later duplicates are dropped."""
    answers: dict[UUID, str] = {}
    for question_id, answer in pairs:
        answers.setdefault(question_id, answer)
    return answers


async def submit(
    repos: Repos,
    principal: Principal,
    assessment_id: UUID,
    answers: Iterable[tuple[UUID, str]],
) -> Result:
    assessment = await _resolve(repos, principal, assessment_id)
    kind = assessment.kind

    async with repos.results.attempt_lock(principal.user_id, assessment.id):
        status = await attempt_gate.check(repos.results, principal.user_id, assessment)
        if not status.can_attempt:
            ASSESSMENT_SUBMISSIONS.labels(kind=kind, outcome="attempt_limit").inc()
            logger.warning(
                "Attempt limit reached  assessment_id=%s user_id=%s previous=%d max=%d",
                assessment.id,
                principal.user_id,
                status.previous_attempts,
                status.max_attempts,
            )
            raise AttemptLimitExceededError(
                status.previous_attempts, status.max_attempts
            )

        questions = await repos.assessments.questions(assessment.id)
        graded = grading.grade(questions, answer_map(answers))
        result = Result.new(
            student_id=principal.user_id,
            assessment_id=assessment.id,
            score=graded.score,
            total_points=graded.total_points,
            percentage=graded.percentage,
            attempt_number=status.current_attempt,
            submitted_at=_now(),
            answers=graded.answers,
        )
        try:
            await repos.results.add(result)
        except ValueError:
            ASSESSMENT_SUBMISSIONS.labels(kind=kind, outcome="conflict").inc()
            logger.warning(
                "Attempt number taken concurrently  assessment_id=%s user_id=%s attempt=%d",
                assessment.id,
                principal.user_id,
                result.attempt_number,
            )
            raise AttemptConflictError(str(assessment.id)) from None

    ASSESSMENT_SUBMISSIONS.labels(kind=kind, outcome="graded").inc()
    GRADED_PERCENTAGE.labels(kind=kind).observe(result.percentage)
    logger.info(
        "Submission graded  assessment_id=%s user_id=%s attempt=%d score=%d/%d",
        assessment.id,
        principal.user_id,
        result.attempt_number,
        result.score,
        result.total_points,
    )
    return result
