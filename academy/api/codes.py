"""Purchase-code endpoints: staff generate and manage, anyone signed in redeems."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from academy.api.dependencies import CurrentUser, RepoBundle, StaffUser
from academy.api.ratelimit import require_rate_limit
from academy.models.purchase import PurchaseCode
from academy.services import purchase_codes
from academy.services.errors import (
    AlreadyPurchasedError,
    CodeAlreadyUsedError,
    ForbiddenError,
    NotFoundError,
)
from academy.services.rate_limiter import REDEEM_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/codes", tags=["codes"])


class GenerateIn(BaseModel):
    course_id: UUID
    count: int = Field(default=1, ge=1, le=purchase_codes.MAX_CODES_PER_REQUEST)


class CodeOut(BaseModel):
    id: str
    code: str
    course_id: str
    created_by: str
    created_at: int
    is_used: bool
    used_by: str | None
    used_at: int | None


class RedeemIn(BaseModel):
    code: str


class PurchaseOut(BaseModel):
    course_id: str
    status: str
    created_at: int


def _code_out(c: PurchaseCode) -> CodeOut:
    return CodeOut(
        id=str(c.id),
        code=c.code,
        course_id=str(c.course_id),
        created_by=c.created_by,
        created_at=c.created_at,
        is_used=c.is_used,
        used_by=c.used_by,
        used_at=c.used_at,
    )


@router.post("", response_model=list[CodeOut], status_code=status.HTTP_201_CREATED)
async def generate_codes(
    payload: GenerateIn, principal: StaffUser, repos: RepoBundle
) -> list[CodeOut]:
    try:
        codes = await purchase_codes.generate_codes(
            repos, principal, payload.course_id, payload.count
        )
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from None
    return [_code_out(c) for c in codes]


@router.get("", response_model=list[CodeOut])
async def list_codes(
    principal: StaffUser, repos: RepoBundle, course_id: UUID | None = None
) -> list[CodeOut]:
    codes = await purchase_codes.list_codes(repos, principal, course_id=course_id)
    return [_code_out(c) for c in codes]


@router.delete("/{code_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_code(
    code_id: UUID, principal: StaffUser, repos: RepoBundle
) -> Response:
    try:
        await purchase_codes.delete_code(repos, principal, code_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from None
    except ForbiddenError as exc:
        logger.warning(
            "Code delete denied  code_id=%s user_id=%s", code_id, principal.user_id
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/redeem",
    response_model=PurchaseOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(REDEEM_LIMIT, scope="redeem"))],
)
async def redeem_code(
    payload: RedeemIn, principal: CurrentUser, repos: RepoBundle
) -> PurchaseOut:
    try:
        purchase = await purchase_codes.redeem(repos, principal, payload.code)
    except NotFoundError:
        logger.warning("Unknown purchase code  user_id=%s", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Invalid code"
        ) from None
    except CodeAlreadyUsedError:
        logger.warning("Purchase code reuse  user_id=%s", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Code has already been used"
        ) from None
    except AlreadyPurchasedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Course has already been purchased",
        ) from None
    return PurchaseOut(
        course_id=str(purchase.course_id),
        status=purchase.status,
        created_at=purchase.created_at,
    )
