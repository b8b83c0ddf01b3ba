"""Course catalogue, chapters, ordered content and chapter progress."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import (
    answers_for,
    auth,
    create_assessment,
    seed_course,
    seed_purchase,
)


def _chapter(client: TestClient, token: str, course_id, title: str, position: int | None = None, publish: bool = True) -> dict:
    resp = client.post(
        f"/v1/courses/{course_id}/chapters",
        json={"title": title, "position": position},
        headers=auth(token),
    )
    assert resp.status_code == 201, resp.text
    chapter = resp.json()
    if publish:
        resp = client.patch(
            f"/v1/chapters/{chapter['id']}/publish",
            json={"is_published": True},
            headers=auth(token),
        )
        assert resp.status_code == 200
    return chapter


def test_course_lifecycle(client: TestClient, teacher_token: str) -> None:
    resp = client.post(
        "/v1/courses",
        json={"title": "النحو العربي", "description": "Grammar"},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 201
    course = resp.json()
    assert course["is_published"] is False
    assert course["created_by"] == "teacher-1"

    # drafts are hidden from the public catalogue, not from staff
    assert client.get("/v1/courses").json() == []
    assert len(client.get("/v1/courses", headers=auth(teacher_token)).json()) == 1

    client.patch(
        f"/v1/courses/{course['id']}/publish",
        json={"is_published": True},
        headers=auth(teacher_token),
    )
    assert [c["title"] for c in client.get("/v1/courses").json()] == ["النحو العربي"]


def test_blank_course_title_is_422(client: TestClient, teacher_token: str) -> None:
    resp = client.post("/v1/courses", json={"title": "  "}, headers=auth(teacher_token))
    assert resp.status_code == 422


def test_content_merges_chapters_and_assessments_by_position(
    client: TestClient, teacher_token: str
) -> None:
    course = seed_course()
    _chapter(client, teacher_token, course.id, "Intro", position=1)
    create_assessment(client, teacher_token, course.id, kind="homework", title="HW", position=3)
    create_assessment(client, teacher_token, course.id, kind="quiz", title="Quiz", position=2)
    _chapter(client, teacher_token, course.id, "Hidden", position=4, publish=False)
    create_assessment(client, teacher_token, course.id, title="Draft quiz", position=5, publish=False)

    resp = client.get(f"/v1/courses/{course.id}/content")

    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "no-store"
    items = resp.json()
    assert [(i["type"], i["title"]) for i in items] == [
        ("chapter", "Intro"),
        ("quiz", "Quiz"),
        ("homework", "HW"),
    ]
    # anonymous viewers get no per-viewer state
    assert items[0]["is_completed"] is None
    assert items[1]["results"] is None


def test_new_chapter_takes_next_free_position(
    client: TestClient, teacher_token: str
) -> None:
    course = seed_course()
    create_assessment(client, teacher_token, course.id, position=7)
    chapter = _chapter(client, teacher_token, course.id, "After quiz")
    assert chapter["position"] == 8

    resp = client.post(
        f"/v1/courses/{course.id}/chapters",
        json={"title": "Clash", "position": 7},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 409


def test_unpublished_course_content_is_404_for_students(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course(published=False)
    assert client.get(f"/v1/courses/{course.id}/content", headers=auth(student_token)).status_code == 404
    assert client.get(f"/v1/courses/{course.id}/content", headers=auth(teacher_token)).status_code == 200


def test_content_shows_viewer_progress_and_results(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    chapter = _chapter(client, teacher_token, course.id, "Intro")
    quiz = create_assessment(client, teacher_token, course.id, max_attempts=2)

    resp = client.put(
        f"/v1/courses/{course.id}/chapters/{chapter['id']}/progress",
        headers=auth(student_token),
    )
    assert resp.status_code == 200
    assert resp.json()["is_completed"] is True
    client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "القاهرة", "true", "kutub"),
        headers=auth(student_token),
    )

    items = client.get(f"/v1/courses/{course.id}/content", headers=auth(student_token)).json()
    by_type = {i["type"]: i for i in items}
    assert by_type["chapter"]["is_completed"] is True
    [summary] = by_type["quiz"]["results"]
    assert summary["percentage"] == 100.0
    assert summary["attempt_number"] == 1
    assert by_type["quiz"]["max_attempts"] == 2


def test_progress_can_be_cleared(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    chapter = _chapter(client, teacher_token, course.id, "Intro")
    url = f"/v1/courses/{course.id}/chapters/{chapter['id']}/progress"

    # marking twice is idempotent
    assert client.put(url, headers=auth(student_token)).status_code == 200
    assert client.put(url, headers=auth(student_token)).status_code == 200
    assert client.delete(url, headers=auth(student_token)).status_code == 204
    assert client.delete(url, headers=auth(student_token)).status_code == 404

    items = client.get(f"/v1/courses/{course.id}/content", headers=auth(student_token)).json()
    assert items[0]["is_completed"] is False


def test_progress_requires_purchase(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    chapter = _chapter(client, teacher_token, course.id, "Intro")
    resp = client.put(
        f"/v1/courses/{course.id}/chapters/{chapter['id']}/progress",
        headers=auth(student_token),
    )
    assert resp.status_code == 403


def test_progress_on_chapter_of_other_course_is_404(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course, other = seed_course("A"), seed_course("B")
    seed_purchase("student-1", course.id)
    foreign = _chapter(client, teacher_token, other.id, "Elsewhere")
    resp = client.put(
        f"/v1/courses/{course.id}/chapters/{foreign['id']}/progress",
        headers=auth(student_token),
    )
    assert resp.status_code == 404


def test_course_progress_counts_finished_published_content(
    client: TestClient, teacher_token: str, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    first = _chapter(client, teacher_token, course.id, "الدرس الأول")
    _chapter(client, teacher_token, course.id, "الدرس الثاني")
    _chapter(client, teacher_token, course.id, "مسودة", publish=False)
    quiz = create_assessment(client, teacher_token, course.id, title="Quiz")
    homework = create_assessment(
        client, teacher_token, course.id, kind="homework", title="HW", max_attempts=3
    )
    create_assessment(client, teacher_token, course.id, title="Draft", publish=False)

    client.put(
        f"/v1/courses/{course.id}/chapters/{first['id']}/progress",
        headers=auth(student_token),
    )
    client.post(
        f"/v1/assessments/{quiz['id']}/submit",
        json=answers_for(quiz, "القاهرة"),
        headers=auth(student_token),
    )
    # repeated attempts on the same homework count once
    for _ in range(2):
        client.post(
            f"/v1/assessments/{homework['id']}/submit",
            json=answers_for(homework, "أسوان"),
            headers=auth(student_token),
        )

    resp = client.get(f"/v1/courses/{course.id}/progress", headers=auth(student_token))
    assert resp.status_code == 200
    assert resp.headers["Cache-Control"] == "no-store"
    # 2 published chapters + quiz + homework; chapter 1, quiz and homework done
    assert resp.json() == {"completed": 3, "total": 4, "percentage": 75.0}


def test_course_progress_of_empty_course_is_zero(
    client: TestClient, student_token: str
) -> None:
    course = seed_course()
    seed_purchase("student-1", course.id)
    resp = client.get(f"/v1/courses/{course.id}/progress", headers=auth(student_token))
    assert resp.status_code == 200
    assert resp.json() == {"completed": 0, "total": 0, "percentage": 0.0}


def test_course_progress_requires_purchase(
    client: TestClient, student_token: str
) -> None:
    course = seed_course()
    resp = client.get(f"/v1/courses/{course.id}/progress", headers=auth(student_token))
    assert resp.status_code == 403


def test_course_progress_needs_authentication(client: TestClient) -> None:
    course = seed_course()
    assert client.get(f"/v1/courses/{course.id}/progress").status_code == 401
