"""Integration tests for account routes."""

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from voyage.main import create_app
from voyage.services import build_in_memory_services

ACCOUNT = {
    "username": "amy",
    "password": "pw-123",
    "security_question": "您的第一隻寵物名字是？",
    "security_answer": "Mochi",
}


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(create_app(build_in_memory_services())) as client:
        client.post("/auth/register", json=ACCOUNT)
        yield client


def _login(client: TestClient, password: str) -> tuple[int, dict[str, Any]]:
    response = client.post("/auth/login", json={"username": "amy", "password": password})
    return response.status_code, response.json()


def test_register_duplicate_is_409(client: TestClient) -> None:
    assert client.post("/auth/register", json=ACCOUNT).status_code == 409


def test_register_blank_answer_is_400(client: TestClient) -> None:
    response = client.post(
        "/auth/register", json={**ACCOUNT, "username": "ben", "security_answer": ""}
    )

    assert response.status_code == 400


def test_login_and_session(client: TestClient) -> None:
    status, body = _login(client, "pw-123")
    assert status == 200

    headers = {"Authorization": f"Bearer {body['token']}"}
    session = client.get("/auth/session", headers=headers)

    assert session.status_code == 200
    assert session.json()["username"] == "amy"


def test_lockout_after_five_failures(client: TestClient) -> None:
    remaining = []
    for _ in range(4):
        status, body = _login(client, "wrong")
        assert status == 401
        remaining.append(body["detail"]["remaining_attempts"])
    assert remaining == [4, 3, 2, 1]

    status, body = _login(client, "wrong")
    assert status == 423
    assert body["detail"]["retry_after_minutes"] == 5

    # correct password is not even checked while locked
    status, _ = _login(client, "pw-123")
    assert status == 423


def test_logout_ends_session(client: TestClient) -> None:
    _, body = _login(client, "pw-123")
    headers = {"Authorization": f"Bearer {body['token']}"}

    assert client.post("/auth/logout", headers=headers).status_code == 204
    assert client.get("/auth/session", headers=headers).status_code == 401


def test_change_password(client: TestClient) -> None:
    _, body = _login(client, "pw-123")
    headers = {"Authorization": f"Bearer {body['token']}"}

    response = client.post(
        "/auth/change-password",
        json={"old_password": "pw-123", "new_password": "pw-456"},
        headers=headers,
    )

    assert response.status_code == 204
    assert _login(client, "pw-456")[0] == 200


def test_forgot_password_flow(client: TestClient) -> None:
    question = client.get("/auth/security-question", params={"username": "amy"})
    assert question.json()["question"] == "您的第一隻寵物名字是？"

    wrong = client.post(
        "/auth/reset-password",
        json={"username": "amy", "security_answer": "Tofu", "new_password": "new"},
    )
    assert wrong.status_code == 400

    ok = client.post(
        "/auth/reset-password",
        json={"username": "amy", "security_answer": "Mochi", "new_password": "new"},
    )
    assert ok.status_code == 204
    assert _login(client, "new")[0] == 200


def test_security_question_unknown_user_is_404(client: TestClient) -> None:
    response = client.get("/auth/security-question", params={"username": "nobody"})

    assert response.status_code == 404


def test_security_question_presets(client: TestClient) -> None:
    assert len(client.get("/auth/security-questions").json()) == 5
