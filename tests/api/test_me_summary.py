from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    answers_for,
    auth,
    create_assessment,
    seed_course,
    seed_purchase,
)


def test_summary_reports_best_attempt_and_untried(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    tried = create_assessment(client, teacher_token, course.id, title="Tried", max_attempts=3)
    create_assessment(client, teacher_token, course.id, title="Untried")
    create_assessment(client, teacher_token, course.id, kind="homework", title="HW")

    url = f"/v1/assessments/{tried['id']}/submit"
    client.post(url, json=answers_for(tried, "القاهرة"), headers=auth(student_token))
    client.post(url, json=answers_for(tried, "القاهرة", "true", "kutub"), headers=auth(student_token))
    client.post(url, json=answers_for(tried, "أسوان"), headers=auth(student_token))

    resp = client.get("/v1/me/assessments?kind=quiz", headers=auth(student_token))

    assert resp.status_code == 200
    rows = resp.json()
    assert [r["title"] for r in rows] == ["Tried", "Untried"]
    assert rows[0]["total_attempts"] == 3
    assert rows[0]["best_result"]["attempt_number"] == 2
    assert rows[0]["best_result"]["percentage"] == 100.0
    assert rows[1]["total_attempts"] == 0
    assert rows[1]["best_result"] is None


def test_summary_requires_kind(client: TestClient, student_token: str) -> None:
    assert client.get("/v1/me/assessments", headers=auth(student_token)).status_code == 422
    assert client.get("/v1/me/assessments?kind=exam", headers=auth(student_token)).status_code == 422


def test_summary_without_purchases_is_empty(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    create_assessment(client, teacher_token, course.id)
    resp = client.get("/v1/me/assessments?kind=quiz", headers=auth(student_token))
    assert resp.json() == []
