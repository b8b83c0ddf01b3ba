"""Staff result review across all students."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from tests.conftest import (
    answers_for,
    auth,
    create_assessment,
    mint_token,
    seed_course,
    seed_purchase,
)


def _submit_as(client: TestClient, student: str, assessment: dict, *answers: str) -> dict:
    token = mint_token(username=student, roles=["student"])
    resp = client.post(
        f"/v1/assessments/{assessment['id']}/submit",
        json=answers_for(assessment, *answers),
        headers=auth(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_staff_see_every_students_results(
    client: TestClient, teacher_token: str
) -> None:
    course = seed_course()
    seed_purchase("amal", course.id)
    seed_purchase("omar", course.id)
    quiz = create_assessment(client, teacher_token, course.id)
    other = create_assessment(client, teacher_token, course.id, title="Quiz 2")

    _submit_as(client, "amal", quiz, "القاهرة")
    _submit_as(client, "omar", quiz, "أسوان")
    _submit_as(client, "omar", other, "القاهرة")

    everything = client.get("/v1/results", headers=auth(teacher_token))
    assert everything.status_code == 200
    assert len(everything.json()) == 3

    filtered = client.get(
        f"/v1/results?assessment_id={quiz['id']}", headers=auth(teacher_token)
    ).json()
    assert {r["student_id"] for r in filtered} == {"amal", "omar"}


def test_result_detail_includes_graded_answers(
    client: TestClient, teacher_token: str, admin_token: str
) -> None:
    course = seed_course()
    seed_purchase("amal", course.id)
    quiz = create_assessment(client, teacher_token, course.id)
    submitted = _submit_as(client, "amal", quiz, "القاهرة", "false", "KUTUB")

    resp = client.get(f"/v1/results/{submitted['id']}", headers=auth(admin_token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == 4
    assert [a["is_correct"] for a in body["answers"]] == [True, False, True]
    assert body["answers"][2]["student_answer"] == "KUTUB"


def test_unknown_result_is_404(client: TestClient, teacher_token: str) -> None:
    resp = client.get(f"/v1/results/{uuid4()}", headers=auth(teacher_token))
    assert resp.status_code == 404
