"""Repository bundle handed to services.

Without DATABASE_URL the API uses the process-wide ``in_memory_repos``;
with it, ``pg_repos(session)`` binds fresh SQL repos to the request's
session so that every write in a request shares one transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from academy.repos.assessment_repo import AssessmentRepo, InMemoryAssessmentRepo
from academy.repos.course_repo import CourseRepo, InMemoryCourseRepo
from academy.repos.pg_assessment_repo import PgAssessmentRepo
from academy.repos.pg_course_repo import PgCourseRepo
from academy.repos.pg_purchase_repo import PgPurchaseRepo
from academy.repos.pg_result_repo import PgResultRepo
from academy.repos.purchase_repo import InMemoryPurchaseRepo, PurchaseRepo
from academy.repos.result_repo import InMemoryResultRepo, ResultRepo


@dataclass(frozen=True, slots=True)
class Repos:
    courses: CourseRepo
    purchases: PurchaseRepo
    assessments: AssessmentRepo
    results: ResultRepo


def new_in_memory_repos() -> Repos:
    return Repos(
        courses=InMemoryCourseRepo(),
        purchases=InMemoryPurchaseRepo(),
        assessments=InMemoryAssessmentRepo(),
        results=InMemoryResultRepo(),
    )


in_memory_repos: Repos = new_in_memory_repos()


def reset_in_memory_repos() -> Repos:
    """Swap in empty stores (used by the test suite between tests)."""
    global in_memory_repos
    in_memory_repos = new_in_memory_repos()
    return in_memory_repos


def pg_repos(session: AsyncSession) -> Repos:
    return Repos(
        courses=PgCourseRepo(session),
        purchases=PgPurchaseRepo(session),
        assessments=PgAssessmentRepo(session),
        results=PgResultRepo(session),
    )
