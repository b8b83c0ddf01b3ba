"""The caller's own assessment summary (student dashboard)."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from academy.api.dependencies import CurrentUser, RepoBundle
from academy.services import reporting

router = APIRouter(prefix="/v1/me", tags=["me"])


class BestResultOut(BaseModel):
    id: str
    score: int
    total_points: int
    percentage: float
    attempt_number: int
    submitted_at: int


class AssessmentSummaryOut(BaseModel):
    assessment_id: str
    course_id: str
    kind: str
    title: str
    max_attempts: int
    total_attempts: int
    best_result: BestResultOut | None


@router.get("/assessments", response_model=list[AssessmentSummaryOut])
async def my_assessments(
    principal: CurrentUser,
    repos: RepoBundle,
    kind: Literal["quiz", "homework"],
) -> list[AssessmentSummaryOut]:
    rows = await reporting.student_summary(repos, principal.user_id, kind)
    out: list[AssessmentSummaryOut] = []
    for row in rows:
        best = row.best_result
        out.append(
            AssessmentSummaryOut(
                assessment_id=str(row.assessment.id),
                course_id=str(row.assessment.course_id),
                kind=row.assessment.kind,
                title=row.assessment.title,
                max_attempts=row.assessment.max_attempts,
                total_attempts=row.total_attempts,
                best_result=(
                    BestResultOut(
                        id=str(best.id),
                        score=best.score,
                        total_points=best.total_points,
                        percentage=round(best.percentage, 2),
                        attempt_number=best.attempt_number,
                        submitted_at=best.submitted_at,
                    )
                    if best is not None
                    else None
                ),
            )
        )
    return out
