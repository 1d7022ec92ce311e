"""
Pytest configuration and fixtures.
"""

import json
from typing import Optional

import httpx
import pytest

from user_admin.clients.users import UserClient

BACKEND_URL = "http://backend.test"


class FakeBackend:
    """
    In-memory stand-in for the users REST backend.

    Records every request so tests can assert on what was sent.
    """

    def __init__(self, users: Optional[list[dict]] = None):
        self.users = [dict(u) for u in users or []]
        self.requests: list[httpx.Request] = []
        self.fail_with: Optional[int] = None
        self.next_id = max((u["id"] for u in self.users), default=0) + 1

    def requests_for(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="backend exploded")

        path = request.url.path
        if path == "/users":
            if request.method == "GET":
                term = request.url.params.get("search")
                users = self.users
                if term:
                    users = [
                        u for u in users
                        if any(term.lower() in str(v).lower() for v in u.values())
                    ]
                return httpx.Response(200, json=users)
            if request.method == "POST":
                user = {"id": self.next_id, **json.loads(request.content)}
                self.next_id += 1
                self.users.append(user)
                return httpx.Response(201, json=user)

        if path.startswith("/users/"):
            user_id = int(path.rsplit("/", 1)[1])
            match = next((u for u in self.users if u["id"] == user_id), None)
            if match is None:
                return httpx.Response(404, json={"error": "User not found"})
            if request.method == "PUT":
                match.update(json.loads(request.content))
                return httpx.Response(200, json=match)
            if request.method == "DELETE":
                self.users.remove(match)
                return httpx.Response(200)

        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def sample_users() -> list[dict]:
    """Users as the backend returns them."""
    return [
        {
            "id": 1,
            "first": "Ann",
            "last": "Lee",
            "email": "ann@example.com",
            "phone": "555-0100",
            "location": "Berlin",
            "hobby": "Chess",
        },
        {
            "id": 7,
            "first": "Jo",
            "last": "Ann",
            "email": "j@x.com",
            "phone": "",
            "location": "NYC, NY",
            "hobby": 'Say "hi"',
        },
        {
            "id": 9,
            "first": "Max",
            "last": "Power",
            "email": "max@example.com",
            "phone": None,
            "location": None,
            "hobby": None,
        },
    ]


@pytest.fixture
def backend(sample_users) -> FakeBackend:
    return FakeBackend(sample_users)


@pytest.fixture
def user_client(backend) -> UserClient:
    return UserClient(base_url=BACKEND_URL, transport=backend.transport)
