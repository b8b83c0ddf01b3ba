"""Staff-side authoring of quizzes and homeworks.

Drafts arrive in the authoring shape: a MULTIPLE_CHOICE ``correct_answer``
is an index into the non-empty options, and is converted to the literal
option text before anything is stored.  Questions are never diffed; an
edit replaces the whole set.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, replace
from uuid import UUID

from academy.models.assessment import (
    ASSESSMENT_KINDS,
    Assessment,
    AssessmentKind,
    Question,
)
from academy.repos.registry import Repos
from academy.services.errors import (
    AuthoringValidationError,
    NotFoundError,
    PositionConflictError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class QuestionDraft:
    type: str
    correct_answer: str | int | None
    points: int | None
    text: str | None = None
    options: tuple[str | None, ...] | None = None
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class AssessmentDraft:
    title: str
    questions: tuple[QuestionDraft, ...]
    description: str | None = None
    position: int | None = None
    max_attempts: int = 1
    timer_minutes: int | None = None


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


def _valid_options(options: tuple[str | None, ...] | None) -> list[str]:
    return [opt for opt in (options or ()) if opt and opt.strip()]


def _question_errors(index: int, q: QuestionDraft) -> list[str]:
    label = f"Question {index}"
    errors: list[str] = []

    if not (q.text and q.text.strip()) and not q.image_url:
        errors.append(f"{label}: Text or image is required")

    if q.type == "MULTIPLE_CHOICE":
        valid = _valid_options(q.options)
        if not q.options or len(q.options) < 2:
            errors.append(f"{label}: At least 2 options are required")
        elif len(valid) < 2:
            errors.append(f"{label}: At least 2 valid options are required")
        elif (
            not isinstance(q.correct_answer, int)
            or isinstance(q.correct_answer, bool)
            or not 0 <= q.correct_answer < len(valid)
        ):
            errors.append(f"{label}: Valid correct answer index is required")
    elif q.type == "TRUE_FALSE":
        if q.correct_answer not in ("true", "false"):
            errors.append(f'{label}: Correct answer must be "true" or "false"')
    elif q.type == "SHORT_ANSWER":
        if not str(q.correct_answer or "").strip():
            errors.append(f"{label}: Correct answer is required")
    else:
        errors.append(f"{label}: Unknown question type {q.type!r}")

    if q.points is None or q.points <= 0:
        errors.append(f"{label}: Points must be greater than 0")
    return errors


def validate(draft: AssessmentDraft) -> list[str]:
    """Collect every problem with the draft; an empty list means valid."""
    errors: list[str] = []
    if not draft.title or not draft.title.strip():
        errors.append("Title is required")
    if draft.max_attempts < 1:
        errors.append("Max attempts must be at least 1")
    if draft.timer_minutes is not None and draft.timer_minutes <= 0:
        errors.append("Timer must be greater than 0 minutes")
    if not draft.questions:
        errors.append("At least one question is required")
    for i, q in enumerate(draft.questions, start=1):
        errors.extend(_question_errors(i, q))
    return errors


def normalize_questions(
    assessment_id: UUID, drafts: tuple[QuestionDraft, ...]
) -> list[Question]:
    """Turn validated drafts into storable questions, positions 1..n."""
    questions: list[Question] = []
    for position, q in enumerate(drafts, start=1):
        if q.type == "MULTIPLE_CHOICE":
            options = tuple(_valid_options(q.options))
            correct = options[int(q.correct_answer)]  # type: ignore[arg-type]
        else:
            options = ()
            correct = str(q.correct_answer).strip()
        questions.append(
            Question.new(
                assessment_id=assessment_id,
                type=q.type,  # type: ignore[arg-type]
                correct_answer=correct,
                points=int(q.points),  # type: ignore[arg-type]
                position=position,
                text=(q.text or "").strip(),
                options=options,
                image_url=q.image_url or None,
            )
        )
    return questions


# --- Content positions -------------------------------------------------------


async def used_positions(
    repos: Repos, course_id: UUID, *, exclude_id: UUID | None = None
) -> set[int]:
    """Positions taken by chapters, quizzes and homeworks in one course."""
    chapters = await repos.courses.list_chapters(course_id, published_only=False)
    assessments = await repos.assessments.find(course_ids=[course_id])
    taken = {ch.position for ch in chapters if ch.id != exclude_id}
    taken.update(a.position for a in assessments if a.id != exclude_id)
    return taken


async def resolve_position(
    repos: Repos,
    course_id: UUID,
    requested: int | None,
    *,
    exclude_id: UUID | None = None,
) -> int:
    taken = await used_positions(repos, course_id, exclude_id=exclude_id)
    if requested is None or requested <= 0:
        return max(taken, default=0) + 1
    if requested in taken:
        raise PositionConflictError(requested)
    return requested


# --- Operations ----------------------------------------------------------------


def _raise_if_invalid(draft: AssessmentDraft) -> None:
    errors = validate(draft)
    if errors:
        logger.warning("Rejected assessment draft  errors=%d", len(errors))
        raise AuthoringValidationError(errors)


async def create_assessment(
    repos: Repos,
    *,
    course_id: UUID,
    kind: AssessmentKind,
    draft: AssessmentDraft,
) -> tuple[Assessment, list[Question]]:
    if kind not in ASSESSMENT_KINDS:
        raise AuthoringValidationError([f"Unknown assessment kind {kind!r}"])
    _raise_if_invalid(draft)
    if await repos.courses.get_course(course_id) is None:
        raise NotFoundError("course not found")

    position = await resolve_position(repos, course_id, draft.position)
    assessment = Assessment.new(
        course_id=course_id,
        kind=kind,
        title=draft.title.strip(),
        description=draft.description,
        position=position,
        created_at=_now(),
        max_attempts=draft.max_attempts,
        timer_minutes=draft.timer_minutes,
    )
    questions = normalize_questions(assessment.id, draft.questions)
    await repos.assessments.add(assessment, questions)

    logger.info(
        "Assessment created  assessment_id=%s kind=%s course_id=%s questions=%d",
        assessment.id,
        kind,
        course_id,
        len(questions),
    )
    return assessment, questions


async def replace_assessment(
    repos: Repos, assessment_id: UUID, draft: AssessmentDraft
) -> tuple[Assessment, list[Question]]:
    _raise_if_invalid(draft)
    current = await repos.assessments.get(assessment_id)
    if current is None:
        raise NotFoundError("assessment not found")

    # a missing or non-positive position leaves the item where it is
    if (
        draft.position is None
        or draft.position <= 0
        or draft.position == current.position
    ):
        position = current.position
    else:
        position = await resolve_position(
            repos, current.course_id, draft.position, exclude_id=current.id
        )

    updated = replace(
        current,
        title=draft.title.strip(),
        description=draft.description,
        position=position,
        max_attempts=draft.max_attempts,
        timer_minutes=draft.timer_minutes,
    )
    questions = normalize_questions(updated.id, draft.questions)
    await repos.assessments.replace(updated, questions)

    logger.info(
        "Assessment replaced  assessment_id=%s questions=%d",
        updated.id,
        len(questions),
    )
    return updated, questions


async def set_published(
    repos: Repos, assessment_id: UUID, is_published: bool
) -> Assessment:
    updated = await repos.assessments.set_published(assessment_id, is_published)
    if updated is None:
        raise NotFoundError("assessment not found")
    logger.info(
        "Assessment publish state changed  assessment_id=%s is_published=%s",
        assessment_id,
        is_published,
    )
    return updated


async def delete_assessment(repos: Repos, assessment_id: UUID) -> None:
    if await repos.assessments.get(assessment_id) is None:
        raise NotFoundError("assessment not found")
    removed = await repos.results.delete_for_assessment(assessment_id)
    await repos.assessments.delete(assessment_id)
    logger.info(
        "Assessment deleted  assessment_id=%s results_removed=%d",
        assessment_id,
        removed,
    )


async def get_assessment(
    repos: Repos, assessment_id: UUID
) -> tuple[Assessment, list[Question]]:
    assessment = await repos.assessments.get(assessment_id)
    if assessment is None:
        raise NotFoundError("assessment not found")
    return assessment, await repos.assessments.questions(assessment_id)


async def list_assessments(
    repos: Repos,
    *,
    course_id: UUID | None = None,
    kind: AssessmentKind | None = None,
) -> list[Assessment]:
    course_ids = [course_id] if course_id is not None else None
    return await repos.assessments.find(course_ids=course_ids, kind=kind)
