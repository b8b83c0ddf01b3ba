"""Student load / submit / results flow over HTTP."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from academy.repos import registry
from tests.conftest import (
    answers_for,
    auth,
    create_assessment,
    mint_token,
    seed_course,
    seed_purchase,
)


@pytest.fixture
def enrolled(client: TestClient, teacher_token: str):
    """A published course the default student has purchased."""
    course = seed_course()
    seed_purchase("student-1", course.id)
    return course


def _scenario_a_questions() -> list[dict]:
    return [
        {
            "text": "2 + 2 = ?",
            "type": "MULTIPLE_CHOICE",
            "options": ["2", "3", "4"],
            "correct_answer": 2,
            "points": 10,
        },
        {
            "text": "The earth is flat",
            "type": "TRUE_FALSE",
            "correct_answer": "false",
            "points": 5,
        },
    ]


def test_submit_grades_and_stores_attempt(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(
        client, teacher_token, enrolled.id, questions=_scenario_a_questions()
    )

    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "4", "true"),
        headers=auth(student_token),
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["score"] == 10
    assert body["total_points"] == 15
    assert body["percentage"] == pytest.approx(66.67)
    assert body["attempt_number"] == 1
    first, second = body["answers"]
    assert (first["is_correct"], first["points_earned"]) == (True, 10)
    assert (second["is_correct"], second["points_earned"]) == (False, 0)
    assert first["question"]["options"] == ["2", "3", "4"]
    assert first["correct_answer"] == "4"


def test_second_attempt_rejected_when_single_attempt(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id, max_attempts=1)
    url = f"/v1/assessments/{quiz['id']}/submit"

    assert client.post(url, json=answers_for(quiz, "القاهرة"), headers=auth(student_token)).status_code == 201
    resp = client.post(url, json=answers_for(quiz, "القاهرة"), headers=auth(student_token))

    assert resp.status_code == 400
    assert resp.json()["detail"] == {
        "message": "Maximum attempts reached",
        "previous_attempts": 1,
        "max_attempts": 1,
    }
    results = client.get(
        f"/v1/assessments/{quiz['id']}/results", headers=auth(student_token)
    ).json()
    assert len(results) == 1


def test_attempt_numbers_increase_and_results_are_newest_first(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    hw = create_assessment(
        client, teacher_token, enrolled.id, kind="homework", max_attempts=3
    )
    url = f"/v1/assessments/{hw['id']}/submit"

    numbers = [
        client.post(url, json=answers_for(hw, "x"), headers=auth(student_token)).json()[
            "attempt_number"
        ]
        for _ in range(3)
    ]
    assert numbers == [1, 2, 3]
    assert client.post(url, json={"answers": []}, headers=auth(student_token)).status_code == 400

    results = client.get(f"/v1/assessments/{hw['id']}/results", headers=auth(student_token))
    assert results.status_code == 200
    assert [r["attempt_number"] for r in results.json()] == [3, 2, 1]


def test_load_hides_correct_answers_and_reports_attempts(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id, max_attempts=2)

    resp = client.get(f"/v1/assessments/{quiz['id']}", headers=auth(student_token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["current_attempt"] == 1
    assert body["previous_attempts"] == 0
    assert body["can_attempt"] is True
    assert all("correct_answer" not in q for q in body["questions"])
    assert [q["position"] for q in body["questions"]] == [1, 2, 3]


def test_submit_without_purchase_is_forbidden(
    client: TestClient, teacher_token: str
) -> None:
    course = seed_course()
    quiz = create_assessment(client, teacher_token, course.id)
    outsider = mint_token(username="student-9", roles=["student"])

    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "القاهرة"),
        headers=auth(outsider),
    )
    assert resp.status_code == 403
    assert client.get(f"/v1/assessments/{quiz['id']}", headers=auth(outsider)).status_code == 403


def test_unpublished_assessment_is_invisible_to_students(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    draft = create_assessment(client, teacher_token, enrolled.id, publish=False)

    assert client.get(f"/v1/assessments/{draft['id']}", headers=auth(student_token)).status_code == 404
    resp = client.post(
        f"/v1/assessments/{draft['id']}/submit",
        json={"answers": []},
        headers=auth(student_token),
    )
    assert resp.status_code == 404
    # staff can still preview it
    assert client.get(f"/v1/assessments/{draft['id']}", headers=auth(teacher_token)).status_code == 200


def test_duplicate_answers_keep_the_first(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id)
    mc = next(q for q in quiz["questions"] if q["type"] == "MULTIPLE_CHOICE")

    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json={
            "answers": [
                {"question_id": mc["id"], "answer": "القاهرة"},
                {"question_id": mc["id"], "answer": "أسوان"},
            ]
        },
        headers=auth(student_token),
    )
    assert resp.status_code == 201
    graded = next(a for a in resp.json()["answers"] if a["question_id"] == mc["id"])
    assert graded["student_answer"] == "القاهرة"
    assert graded["is_correct"] is True


def test_null_answer_is_graded_as_empty(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id)
    mc = next(q for q in quiz["questions"] if q["type"] == "MULTIPLE_CHOICE")

    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json={"answers": [{"question_id": mc["id"], "answer": None}]},
        headers=auth(student_token),
    )
    assert resp.status_code == 201, resp.text
    graded = next(a for a in resp.json()["answers"] if a["question_id"] == mc["id"])
    assert graded["student_answer"] == ""
    assert graded["is_correct"] is False


def test_malformed_question_ids_are_ignored(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id)
    body = answers_for(quiz, "القاهرة")
    body["answers"].append({"question_id": "not-a-uuid", "answer": "x"})

    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=body,
        headers=auth(student_token),
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["score"] == 2
    assert len(resp.json()["answers"]) == 3


def test_attempt_number_taken_concurrently_is_409(
    client: TestClient,
    teacher_token: str,
    student_token: str,
    enrolled,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id)

    async def taken(result) -> None:
        raise ValueError("attempt number already recorded")

    monkeypatch.setattr(registry.in_memory_repos.results, "add", taken)
    resp = client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "القاهرة"),
        headers=auth(student_token),
    )
    assert resp.status_code == 409


def test_results_before_any_attempt_is_404(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id)
    resp = client.get(f"/v1/assessments/{quiz['id']}/results", headers=auth(student_token))
    assert resp.status_code == 404


def test_results_snapshot_survives_question_edit(
    client: TestClient, teacher_token: str, student_token: str, enrolled
) -> None:
    quiz = create_assessment(client, teacher_token, enrolled.id, max_attempts=2)
    client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "القاهرة", "true", "kutub"),
        headers=auth(student_token),
    )

    resp = client.put(
        f"/v1/admin/assessments/{quiz['id']}",
        json={
            "title": "Quiz 1 (v2)",
            "max_attempts": 2,
            "questions": [
                {"text": "new", "type": "TRUE_FALSE", "correct_answer": "false", "points": 1}
            ],
        },
        headers=auth(teacher_token),
    )
    assert resp.status_code == 200

    [result] = client.get(
        f"/v1/assessments/{quiz['id']}/results", headers=auth(student_token)
    ).json()
    assert result["score"] == 5
    assert [a["question"]["text"] for a in result["answers"]] == [
        "ما عاصمة مصر؟",
        "الشمس نجم",
        "Plural of kitab?",
    ]
