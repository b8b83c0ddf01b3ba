"""Tests for Prometheus metrics.

prometheus-client uses a global default registry and counters never go
down, so every test asserts on the DELTA across the action under test.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import (
    answers_for,
    auth,
    create_assessment,
    seed_course,
    seed_purchase,
)


def _get_sample(name: str, labels: dict | None = None) -> float:
    """Read a metric sample's current value from the global registry."""
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_endpoint_label_uses_route_template(
    client: TestClient, student_token: str
) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/v1/assessments/{assessment_id}",
        "status_code": "404",
    }
    before = _get_sample("http_requests_total", labels)
    client.get(
        "/v1/assessments/00000000-0000-0000-0000-000000000000",
        headers=auth(student_token),
    )
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "assessment_submissions_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_submission_outcomes_are_counted(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    quiz = create_assessment(client, teacher_token, course.id, max_attempts=1)
    graded = {"kind": "quiz", "outcome": "graded"}
    limited = {"kind": "quiz", "outcome": "attempt_limit"}
    graded_before = _get_sample("assessment_submissions_total", graded)
    limited_before = _get_sample("assessment_submissions_total", limited)
    observed_before = _get_sample("assessment_graded_percentage_count", {"kind": "quiz"})

    url = f"/v1/assessments/{quiz['id']}/submit"
    client.post(url, json=answers_for(quiz, "القاهرة"), headers=auth(student_token))
    client.post(url, json=answers_for(quiz, "القاهرة"), headers=auth(student_token))

    assert _get_sample("assessment_submissions_total", graded) - graded_before == 1
    assert _get_sample("assessment_submissions_total", limited) - limited_before == 1
    assert _get_sample("assessment_graded_percentage_count", {"kind": "quiz"}) - observed_before == 1
