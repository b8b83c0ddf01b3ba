"""Staff authoring endpoints for quizzes and homeworks.

Any teacher or admin may manage any course's assessments.
"""

from __future__ import annotations

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from academy.api.dependencies import RepoBundle, StaffUser
from academy.api.schemas import StaffQuestionOut, staff_question_out
from academy.models.assessment import Assessment, Question
from academy.services import authoring
from academy.services.authoring import AssessmentDraft, QuestionDraft
from academy.services.errors import (
    AuthoringValidationError,
    NotFoundError,
    PositionConflictError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/assessments", tags=["authoring"])


# --- Request / Response schemas -------------------------------------------


class QuestionIn(BaseModel):
    text: str | None = None
    type: str
    options: list[str | None] | None = None
    # option index for MULTIPLE_CHOICE, "true"/"false" or free text otherwise
    correct_answer: int | str | None = None
    points: int | None = None
    image_url: str | None = None


class AssessmentIn(BaseModel):
    title: str
    description: str | None = None
    position: int | None = None
    max_attempts: int = 1
    timer_minutes: int | None = None
    questions: list[QuestionIn] = Field(default_factory=list)


class CreateAssessmentIn(AssessmentIn):
    course_id: UUID
    kind: Literal["quiz", "homework"]


class PublishIn(BaseModel):
    is_published: bool


class AssessmentSummaryOut(BaseModel):
    id: str
    course_id: str
    kind: str
    title: str
    description: str | None
    position: int
    is_published: bool
    max_attempts: int
    timer_minutes: int | None
    created_at: int


class AssessmentDetailOut(AssessmentSummaryOut):
    questions: list[StaffQuestionOut]


def _draft(payload: AssessmentIn) -> AssessmentDraft:
    return AssessmentDraft(
        title=payload.title,
        description=payload.description,
        position=payload.position,
        max_attempts=payload.max_attempts,
        timer_minutes=payload.timer_minutes,
        questions=tuple(
            QuestionDraft(
                type=q.type,
                correct_answer=q.correct_answer,
                points=q.points,
                text=q.text,
                options=tuple(q.options) if q.options is not None else None,
                image_url=q.image_url,
            )
            for q in payload.questions
        ),
    )


def _summary(a: Assessment) -> AssessmentSummaryOut:
    return AssessmentSummaryOut(
        id=str(a.id),
        course_id=str(a.course_id),
        kind=a.kind,
        title=a.title,
        description=a.description,
        position=a.position,
        is_published=a.is_published,
        max_attempts=a.max_attempts,
        timer_minutes=a.timer_minutes,
        created_at=a.created_at,
    )


def _detail(a: Assessment, questions: list[Question]) -> AssessmentDetailOut:
    return AssessmentDetailOut(
        **_summary(a).model_dump(),
        questions=[staff_question_out(q) for q in questions],
    )


def _authoring_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, AuthoringValidationError):
        return HTTPException(
            status_code=422,
            detail={"message": "Invalid assessment", "errors": exc.errors},
        )
    if isinstance(exc, PositionConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# --- Routes --------------------------------------------------------------------


@router.post(
    "", response_model=AssessmentDetailOut, status_code=status.HTTP_201_CREATED
)
async def create_assessment(
    payload: CreateAssessmentIn, principal: StaffUser, repos: RepoBundle
) -> AssessmentDetailOut:
    try:
        assessment, questions = await authoring.create_assessment(
            repos,
            course_id=payload.course_id,
            kind=payload.kind,
            draft=_draft(payload),
        )
    except (AuthoringValidationError, PositionConflictError, NotFoundError) as exc:
        logger.warning(
            "Assessment create rejected  user_id=%s reason=%s",
            principal.user_id,
            type(exc).__name__,
        )
        raise _authoring_http_error(exc) from None
    return _detail(assessment, questions)


@router.get("", response_model=list[AssessmentSummaryOut])
async def list_assessments(
    _principal: StaffUser,
    repos: RepoBundle,
    course_id: UUID | None = None,
    kind: Literal["quiz", "homework"] | None = None,
) -> list[AssessmentSummaryOut]:
    items = await authoring.list_assessments(repos, course_id=course_id, kind=kind)
    return [_summary(a) for a in items]


@router.get("/{assessment_id}", response_model=AssessmentDetailOut)
async def get_assessment(
    assessment_id: UUID, _principal: StaffUser, repos: RepoBundle
) -> AssessmentDetailOut:
    try:
        assessment, questions = await authoring.get_assessment(repos, assessment_id)
    except NotFoundError as exc:
        raise _authoring_http_error(exc) from None
    return _detail(assessment, questions)


@router.put("/{assessment_id}", response_model=AssessmentDetailOut)
async def replace_assessment(
    assessment_id: UUID,
    payload: AssessmentIn,
    principal: StaffUser,
    repos: RepoBundle,
) -> AssessmentDetailOut:
    try:
        assessment, questions = await authoring.replace_assessment(
            repos, assessment_id, _draft(payload)
        )
    except (AuthoringValidationError, PositionConflictError, NotFoundError) as exc:
        logger.warning(
            "Assessment edit rejected  assessment_id=%s user_id=%s reason=%s",
            assessment_id,
            principal.user_id,
            type(exc).__name__,
        )
        raise _authoring_http_error(exc) from None
    return _detail(assessment, questions)


@router.patch("/{assessment_id}/publish", response_model=AssessmentSummaryOut)
async def publish_assessment(
    assessment_id: UUID,
    payload: PublishIn,
    _principal: StaffUser,
    repos: RepoBundle,
) -> AssessmentSummaryOut:
    try:
        assessment = await authoring.set_published(
            repos, assessment_id, payload.is_published
        )
    except NotFoundError as exc:
        raise _authoring_http_error(exc) from None
    return _summary(assessment)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(
    assessment_id: UUID, _principal: StaffUser, repos: RepoBundle
) -> Response:
    try:
        await authoring.delete_assessment(repos, assessment_id)
    except NotFoundError as exc:
        raise _authoring_http_error(exc) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
