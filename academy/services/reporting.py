"""Result views for students and staff."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from academy.models.assessment import Assessment, AssessmentKind
from academy.models.result import Result
from academy.repos.registry import Repos
from academy.repos.result_repo import ResultRepo
from academy.services.errors import NotFoundError


@dataclass(frozen=True, slots=True)
class SummaryRow:
    assessment: Assessment
    best_result: Result | None
    total_attempts: int


def most_recent_first(results: list[Result]) -> list[Result]:
    return sorted(
        results, key=lambda r: (r.submitted_at, r.attempt_number), reverse=True
    )


def best_of(results: list[Result]) -> Result | None:
    """Highest percentage; on a tie the earlier attempt is kept."""
    best: Result | None = None
    for r in sorted(results, key=lambda r: r.attempt_number):
        if best is None or r.percentage > best.percentage:
            best = r
    return best


async def student_results(
    results: ResultRepo, student_id: str, assessment_id: UUID
) -> list[Result]:
    own = await results.for_student(student_id, assessment_id=assessment_id)
    return sorted(own, key=lambda r: r.attempt_number, reverse=True)


async def student_summary(
    repos: Repos, student_id: str, kind: AssessmentKind
) -> list[SummaryRow]:
    """Attempted assessments first (best result each), then untried ones.

    Untried rows cover every published assessment of ``kind`` in a course
    the student has purchased.
    """
    grouped: dict[UUID, list[Result]] = {}
    for r in most_recent_first(await repos.results.for_student(student_id)):
        grouped.setdefault(r.assessment_id, []).append(r)

    rows: list[SummaryRow] = []
    attempted: set[UUID] = set()
    for assessment_id, results in grouped.items():
        assessment = await repos.assessments.get(assessment_id)
        if assessment is None or assessment.kind != kind:
            continue
        attempted.add(assessment_id)
        rows.append(
            SummaryRow(
                assessment=assessment,
                best_result=best_of(results),
                total_attempts=len(results),
            )
        )

    course_ids = await repos.purchases.purchased_course_ids(student_id)
    if course_ids:
        for a in await repos.assessments.find(
            course_ids=course_ids, kind=kind, published_only=True
        ):
            if a.id not in attempted:
                rows.append(SummaryRow(assessment=a, best_result=None, total_attempts=0))
    return rows


async def staff_results(
    results: ResultRepo, *, assessment_id: UUID | None = None
) -> list[Result]:
    return most_recent_first(await results.find(assessment_id=assessment_id))


async def result_detail(results: ResultRepo, result_id: UUID) -> Result:
    result = await results.get(result_id)
    if result is None:
        raise NotFoundError("result not found")
    return result
