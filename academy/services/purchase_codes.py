"""Purchase-code generation and redemption.

Codes are 12 characters drawn with ``secrets`` from an upper-case alphabet
without look-alike glyphs (no 0/O, 1/I/L), so they survive being read
aloud or copied by hand.
"""

from __future__ import annotations

import datetime
import logging
import secrets
from uuid import UUID

from academy.core.metrics import PURCHASE_CODE_REDEMPTIONS
from academy.models.principal import Principal
from academy.models.purchase import Purchase, PurchaseCode
from academy.repos.registry import Repos
from academy.services.errors import (
    AlreadyPurchasedError,
    CodeAlreadyUsedError,
    ForbiddenError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 12
MAX_CODES_PER_REQUEST = 100
_MAX_DRAWS = 10


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


def new_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(raw: str) -> str:
    return raw.strip().upper()


async def generate_codes(
    repos: Repos, principal: Principal, course_id: UUID, count: int
) -> list[PurchaseCode]:
    if not 1 <= count <= MAX_CODES_PER_REQUEST:
        raise ValueError(f"count must be between 1 and {MAX_CODES_PER_REQUEST}")
    if await repos.courses.get_course(course_id) is None:
        raise NotFoundError("course not found")

    now = _now()
    values: set[str] = set()
    while len(values) < count:
        for _ in range(_MAX_DRAWS):
            candidate = new_code()
            if candidate not in values and not await repos.purchases.code_exists(
                candidate
            ):
                values.add(candidate)
                break
        else:
            raise RuntimeError("could not draw a unique purchase code")

    codes = [
        PurchaseCode.new(
            code=v, course_id=course_id, created_by=principal.user_id, created_at=now
        )
        for v in sorted(values)
    ]
    await repos.purchases.add_codes(codes)
    logger.info(
        "Purchase codes generated  course_id=%s count=%d user_id=%s",
        course_id,
        len(codes),
        principal.user_id,
    )
    return codes


async def list_codes(
    repos: Repos, principal: Principal, *, course_id: UUID | None = None
) -> list[PurchaseCode]:
    """Admins see every code; teachers only the ones they generated."""
    created_by = None if principal.is_admin() else principal.user_id
    return await repos.purchases.list_codes(course_id=course_id, created_by=created_by)


async def delete_code(repos: Repos, principal: Principal, code_id: UUID) -> None:
    code = await repos.purchases.get_code(code_id)
    if code is None:
        raise NotFoundError("code not found")
    if not principal.is_admin() and code.created_by != principal.user_id:
        raise ForbiddenError("code belongs to another teacher")
    await repos.purchases.delete_code(code_id)
    logger.info("Purchase code deleted  code_id=%s user_id=%s", code_id, principal.user_id)


async def redeem(repos: Repos, principal: Principal, raw_code: str) -> Purchase:
    code = await repos.purchases.get_code_by_value(normalize_code(raw_code))
    if code is None:
        PURCHASE_CODE_REDEMPTIONS.labels(result="unknown").inc()
        raise NotFoundError("code not found")
    if code.is_used:
        PURCHASE_CODE_REDEMPTIONS.labels(result="used").inc()
        raise CodeAlreadyUsedError(str(code.id))
    if await repos.purchases.has_purchase(principal.user_id, code.course_id):
        PURCHASE_CODE_REDEMPTIONS.labels(result="already_purchased").inc()
        raise AlreadyPurchasedError(str(code.course_id))

    now = _now()
    if await repos.purchases.mark_code_used(code.id, principal.user_id, now) is None:
        PURCHASE_CODE_REDEMPTIONS.labels(result="used").inc()
        raise CodeAlreadyUsedError(str(code.id))

    purchase = Purchase(user_id=principal.user_id, course_id=code.course_id, created_at=now)
    try:
        await repos.purchases.add_purchase(purchase)
    except ValueError:
        PURCHASE_CODE_REDEMPTIONS.labels(result="already_purchased").inc()
        raise AlreadyPurchasedError(str(code.course_id)) from None

    PURCHASE_CODE_REDEMPTIONS.labels(result="redeemed").inc()
    logger.info(
        "Purchase code redeemed  code_id=%s course_id=%s user_id=%s",
        code.id,
        code.course_id,
        principal.user_id,
    )
    return purchase
