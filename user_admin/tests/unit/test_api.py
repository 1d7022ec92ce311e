"""
Tests for the FastAPI facade in front of the users backend.
"""

import pytest
from fastapi.testclient import TestClient

from user_admin.api.main import app
from user_admin.api.routes.users import get_user_client


@pytest.fixture
def api(user_client):
    """FastAPI test client talking to the fake backend."""
    app.dependency_overrides[get_user_client] = lambda: user_client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "user-admin"


def test_list_users(api):
    response = api.get("/api/users")

    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [1, 7, 9]


def test_list_users_forwards_search(api, backend):
    response = api.get("/api/users", params={"search": "max"})

    assert [u["id"] for u in response.json()] == [9]
    assert backend.requests[0].url.params["search"] == "max"


def test_create_user(api, backend):
    payload = {"first": "New", "last": "Person", "email": "new@example.com", "phone": "1"}

    response = api.post("/api/users", json=payload)

    assert response.status_code == 201
    assert response.json()["id"] == 10
    assert response.json()["location"] == ""


def test_create_user_requires_names_and_email(api, backend):
    response = api.post("/api/users", json={"first": " ", "last": "Person", "email": ""})

    assert response.status_code == 422
    assert backend.requests == []


def test_update_user(api, backend):
    payload = {"first": "Jo", "last": "Ann", "email": "j@x.com", "hobby": "Chess"}

    response = api.put("/api/users/7", json=payload)

    assert response.status_code == 200
    assert response.json()["hobby"] == "Chess"
    assert backend.requests_for("PUT")[0].url.path == "/users/7"


def test_update_unknown_user_is_bad_gateway(api):
    payload = {"first": "Jo", "last": "Ann", "email": "j@x.com"}

    response = api.put("/api/users/404", json=payload)

    assert response.status_code == 502
    assert response.json()["error"] == "Backend request failed"


def test_delete_user(api, backend):
    response = api.delete("/api/users/1")

    assert response.status_code == 204
    assert [u["id"] for u in backend.users] == [7, 9]


def test_backend_failure_is_bad_gateway(api, backend):
    backend.fail_with = 500

    response = api.get("/api/users")

    assert response.status_code == 502
    assert "backend exploded" not in response.text


def test_export_downloads_csv(api, backend):
    response = api.get("/api/users/export")

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/csv;charset=utf-8;"
    assert response.headers["content-disposition"] == 'attachment; filename="users.csv"'
    assert response.content.startswith(b"\xef\xbb\xbf")

    text = response.content.decode("utf-8")
    lines = text[1:].split("\n")
    assert lines[0] == "ID;First;Last;Email;Phone;Location;Hobby"
    assert len(lines) == 4
    assert "search" not in backend.requests[0].url.params


def test_export_backend_failure(api, backend):
    backend.fail_with = 503

    response = api.get("/api/users/export")

    assert response.status_code == 502
