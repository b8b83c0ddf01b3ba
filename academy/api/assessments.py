"""Student-facing quiz and homework endpoints.

  GET  /v1/assessments/{id}          definition (no answers) + attempt status
  POST /v1/assessments/{id}/submit   grade and store one attempt
  GET  /v1/assessments/{id}/results  the caller's own attempts, newest first
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from academy.api.dependencies import CurrentUser, RepoBundle
from academy.api.ratelimit import require_rate_limit
from academy.api.schemas import QuestionOut, ResultOut, question_out, result_out
from academy.services import reporting, submissions
from academy.services.errors import (
    AttemptConflictError,
    AttemptLimitExceededError,
    ForbiddenError,
    NotFoundError,
)
from academy.services.rate_limiter import SUBMIT_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/assessments", tags=["assessments"])


class AssessmentOut(BaseModel):
    id: str
    course_id: str
    kind: str
    title: str
    description: str | None
    position: int
    max_attempts: int
    timer_minutes: int | None
    questions: list[QuestionOut]
    current_attempt: int
    previous_attempts: int
    can_attempt: bool


class AnswerIn(BaseModel):
    # unknown or malformed ids are ignored by grading, never rejected
    question_id: str
    answer: str | None = None


class SubmitIn(BaseModel):
    answers: list[AnswerIn] = []


def _answer_pairs(answers: list[AnswerIn]) -> list[tuple[UUID, str]]:
    pairs: list[tuple[UUID, str]] = []
    for a in answers:
        try:
            question_id = UUID(a.question_id)
        except ValueError:
            continue
        pairs.append((question_id, a.answer or ""))
    return pairs


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _forbidden(exc: ForbiddenError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


@router.get("/{assessment_id}", response_model=AssessmentOut)
async def get_assessment(
    assessment_id: UUID, principal: CurrentUser, repos: RepoBundle
) -> AssessmentOut:
    try:
        loaded = await submissions.load_for_student(repos, principal, assessment_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ForbiddenError as exc:
        logger.warning(
            "Assessment load denied  assessment_id=%s user_id=%s",
            assessment_id,
            principal.user_id,
        )
        raise _forbidden(exc) from None

    a = loaded.assessment
    return AssessmentOut(
        id=str(a.id),
        course_id=str(a.course_id),
        kind=a.kind,
        title=a.title,
        description=a.description,
        position=a.position,
        max_attempts=a.max_attempts,
        timer_minutes=a.timer_minutes,
        questions=[question_out(q) for q in loaded.questions],
        current_attempt=loaded.status.current_attempt,
        previous_attempts=loaded.status.previous_attempts,
        can_attempt=loaded.status.can_attempt,
    )


@router.post(
    "/{assessment_id}/submit",
    response_model=ResultOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(SUBMIT_LIMIT, scope="submit"))],
)
async def submit_assessment(
    assessment_id: UUID,
    payload: SubmitIn,
    principal: CurrentUser,
    repos: RepoBundle,
) -> ResultOut:
    pairs = _answer_pairs(payload.answers)
    try:
        result = await submissions.submit(repos, principal, assessment_id, pairs)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ForbiddenError as exc:
        logger.warning(
            "Submission denied  assessment_id=%s user_id=%s",
            assessment_id,
            principal.user_id,
        )
        raise _forbidden(exc) from None
    except AttemptLimitExceededError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Maximum attempts reached",
                "previous_attempts": exc.previous_attempts,
                "max_attempts": exc.max_attempts,
            },
        ) from None
    except AttemptConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another submission for this attempt is already recorded",
        ) from None

    return result_out(result)


@router.get("/{assessment_id}/results", response_model=list[ResultOut])
async def my_results(
    assessment_id: UUID, principal: CurrentUser, repos: RepoBundle
) -> list[ResultOut]:
    results = await reporting.student_results(
        repos.results, principal.user_id, assessment_id
    )
    if not results:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No results found"
        )
    return [result_out(r) for r in results]
