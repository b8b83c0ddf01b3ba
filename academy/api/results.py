"""Staff grade review: every student's results, no ownership filter."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from academy.api.dependencies import RepoBundle, StaffUser
from academy.api.schemas import ResultOut, result_out
from academy.services import reporting
from academy.services.errors import NotFoundError

router = APIRouter(prefix="/v1/results", tags=["results"])


@router.get("", response_model=list[ResultOut])
async def list_results(
    _principal: StaffUser,
    repos: RepoBundle,
    assessment_id: UUID | None = None,
) -> list[ResultOut]:
    results = await reporting.staff_results(repos.results, assessment_id=assessment_id)
    return [result_out(r) for r in results]


@router.get("/{result_id}", response_model=ResultOut)
async def get_result(
    result_id: UUID, _principal: StaffUser, repos: RepoBundle
) -> ResultOut:
    try:
        result = await reporting.result_detail(repos.results, result_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from None
    return result_out(result)
