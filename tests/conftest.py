from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from academy.api.ratelimit import rate_limiter
from academy.main import app
from academy.models.course import Course
from academy.models.purchase import Purchase
from academy.repos import registry
from academy.services import token_service
from academy.services.rate_limiter import InMemoryRateLimiter


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Fresh in-memory stores for every test."""
    registry.reset_in_memory_repos()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if isinstance(rate_limiter, InMemoryRateLimiter):
        rate_limiter.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_token() -> str:
    return mint_token(username="student-1", roles=["student"])


@pytest.fixture
def teacher_token() -> str:
    return mint_token(username="teacher-1", roles=["teacher"])


@pytest.fixture
def admin_token() -> str:
    return mint_token(username="admin-1", roles=["admin"])


# ---------------------------------------------------------------------------
# Seeding helpers (write straight into the in-memory repos)
# ---------------------------------------------------------------------------


def seed_course(title: str = "Arabic Grammar 101", *, published: bool = True) -> Course:
    course = Course.new(title=title, created_by="teacher-1", created_at=1_700_000_000)
    repos = registry.in_memory_repos
    asyncio.run(repos.courses.add_course(course))
    if published:
        course = asyncio.run(repos.courses.set_course_published(course.id, True))
    return course


def seed_purchase(user_id: str, course_id: UUID) -> Purchase:
    purchase = Purchase(user_id=user_id, course_id=course_id, created_at=1_700_000_000)
    asyncio.run(registry.in_memory_repos.purchases.add_purchase(purchase))
    return purchase


def sample_questions() -> list[dict[str, Any]]:
    """One of each type, 2 + 1 + 2 = 5 points."""
    return [
        {
            "text": "ما عاصمة مصر؟",
            "type": "MULTIPLE_CHOICE",
            "options": ["الإسكندرية", "القاهرة", "أسوان"],
            "correct_answer": 1,
            "points": 2,
        },
        {"text": "الشمس نجم", "type": "TRUE_FALSE", "correct_answer": "true", "points": 1},
        {
            "text": "Plural of kitab?",
            "type": "SHORT_ANSWER",
            "correct_answer": "Kutub",
            "points": 2,
        },
    ]


def create_assessment(
    client: TestClient,
    token: str,
    course_id: UUID,
    *,
    kind: str = "quiz",
    title: str = "Quiz 1",
    max_attempts: int = 1,
    publish: bool = True,
    questions: list[dict[str, Any]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Create (and by default publish) an assessment through the staff API."""
    body = {
        "course_id": str(course_id),
        "kind": kind,
        "title": title,
        "max_attempts": max_attempts,
        "questions": questions if questions is not None else sample_questions(),
        **extra,
    }
    resp = client.post("/v1/admin/assessments", json=body, headers=auth(token))
    assert resp.status_code == 201, resp.text
    created = resp.json()
    if publish:
        resp = client.patch(
            f"/v1/admin/assessments/{created['id']}/publish",
            json={"is_published": True},
            headers=auth(token),
        )
        assert resp.status_code == 200, resp.text
    return created


def answers_for(assessment: dict[str, Any], *values: str) -> dict[str, Any]:
    """Submit body pairing ``values`` with the questions in position order."""
    questions = sorted(assessment["questions"], key=lambda q: q["position"])
    return {
        "answers": [
            {"question_id": q["id"], "answer": v} for q, v in zip(questions, values)
        ]
    }
