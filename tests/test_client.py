"""API client and session tests."""
import json

import httpx
import pytest

from app.client import ClientError, ClientSession, StudyGroupClient

BASE_URL = "http://studygroup.test/api/v1"

USER = {"id": 7, "name": "Alice", "email": "alice@school.edu", "role": "student"}


def make_client(handler) -> StudyGroupClient:
    return StudyGroupClient(BASE_URL, transport=httpx.MockTransport(handler))


def test_login_fills_session_and_authorizes_later_calls():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/auth/login"):
            assert json.loads(request.content) == {"email": "alice@school.edu", "password": "pw"}
            return httpx.Response(200, json={"success": True, "token": "tok", "user": USER})
        return httpx.Response(200, json={"success": True, "count": 0, "projects": []})

    session = ClientSession()
    with make_client(handler) as client:
        client.login(session, "alice@school.edu", "pw")
        assert client.list_projects(session) == []

    assert session.token == "tok"
    assert session.user_id == 7
    assert "authorization" not in seen[0].headers
    assert seen[1].headers["authorization"] == "Bearer tok"
    assert seen[1].url.path == "/api/v1/projects"


def test_error_envelope_becomes_client_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={
            "success": False,
            "error": {"code": "PERMISSION_DENIED", "message": "nope", "details": {"required_permission": "task:create"}},
        })

    with make_client(handler) as client, pytest.raises(ClientError) as exc_info:
        client.create_task(ClientSession(token="tok"), 1, title="t")

    error = exc_info.value
    assert error.status_code == 403
    assert error.code == "PERMISSION_DENIED"
    assert error.details == {"required_permission": "task:create"}


def test_non_json_error_falls_back_to_reason():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    with make_client(handler) as client, pytest.raises(ClientError) as exc_info:
        client.me(ClientSession(token="tok"))

    assert exc_info.value.code == "HTTP_ERROR"
    assert exc_info.value.message == "Bad Gateway"


def test_session_persists_and_clears(tmp_path):
    path = tmp_path / "session.json"
    ClientSession(token="tok", user=USER).save(path)

    loaded = ClientSession.load(path)
    assert loaded.is_authenticated
    assert loaded.role == "student"
    assert loaded.auth_headers() == {"Authorization": "Bearer tok"}

    loaded.clear(path)
    assert not loaded.is_authenticated
    assert loaded.user == {}
    assert not path.exists()
    assert ClientSession.load(path) == ClientSession()


def test_unreadable_session_file_gives_empty_session(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")

    assert ClientSession.load(path) == ClientSession()


@pytest.mark.parametrize("content", ["[]", '"token"', "42", "null"])
def test_session_file_holding_non_object_gives_empty_session(tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content)

    assert ClientSession.load(path) == ClientSession()


def test_logout_clears_session():
    session = ClientSession(token="tok", user=USER)
    with make_client(lambda request: httpx.Response(200, json={})) as client:
        client.logout(session)

    assert session.token is None
