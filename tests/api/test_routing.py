from __future__ import annotations

from fastapi.testclient import TestClient

from academy.main import app


def _routes() -> set[tuple[str, str]]:
    # the OpenAPI document lists every schema route, however routers are nested
    paths = app.openapi()["paths"]
    return {
        (method.upper(), path) for path, operations in paths.items() for method in operations
    }


def test_expected_routes_are_mounted() -> None:
    routes = _routes()
    expected = {
        ("GET", "/health"),
        ("GET", "/ready"),
        ("GET", "/v1/courses"),
        ("POST", "/v1/courses"),
        ("PATCH", "/v1/courses/{course_id}/publish"),
        ("GET", "/v1/courses/{course_id}/content"),
        ("GET", "/v1/courses/{course_id}/progress"),
        ("POST", "/v1/courses/{course_id}/chapters"),
        ("PATCH", "/v1/chapters/{chapter_id}/publish"),
        ("PUT", "/v1/courses/{course_id}/chapters/{chapter_id}/progress"),
        ("DELETE", "/v1/courses/{course_id}/chapters/{chapter_id}/progress"),
        ("GET", "/v1/assessments/{assessment_id}"),
        ("POST", "/v1/assessments/{assessment_id}/submit"),
        ("GET", "/v1/assessments/{assessment_id}/results"),
        ("POST", "/v1/admin/assessments"),
        ("GET", "/v1/admin/assessments"),
        ("GET", "/v1/admin/assessments/{assessment_id}"),
        ("PUT", "/v1/admin/assessments/{assessment_id}"),
        ("PATCH", "/v1/admin/assessments/{assessment_id}/publish"),
        ("DELETE", "/v1/admin/assessments/{assessment_id}"),
        ("GET", "/v1/results"),
        ("GET", "/v1/results/{result_id}"),
        ("GET", "/v1/me/assessments"),
        ("POST", "/v1/codes"),
        ("GET", "/v1/codes"),
        ("DELETE", "/v1/codes/{code_id}"),
        ("POST", "/v1/codes/redeem"),
    }
    missing = expected - routes
    assert not missing, f"missing routes: {sorted(missing)}"


def test_no_login_or_registration_routes() -> None:
    # identity is delegated to the external provider
    paths = {path for _, path in _routes()}
    assert not any(p.startswith(("/auth", "/login", "/register", "/oauth")) for p in paths)


def test_metrics_is_served_but_not_documented(client: TestClient) -> None:
    assert ("GET", "/metrics") not in _routes()
    assert client.get("/metrics").status_code == 200
