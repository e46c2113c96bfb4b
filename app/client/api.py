"""HTTP client for the StudyGroup API."""

import logging
from collections.abc import Iterable
from typing import Any, BinaryIO

import httpx

from app.client.session import ClientSession

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ClientError(Exception):
    """Error envelope returned by the API, or a transport failure."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ClientError":
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        return cls(
            response.status_code,
            error.get("code", "HTTP_ERROR"),
            error.get("message", response.reason_phrase),
            error.get("details"),
        )


class StudyGroupClient:
    """Thin wrapper over the REST API.

    Calls that need authentication take the ``ClientSession`` explicitly.
    """

    def __init__(
        self,
        base_url: str,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "StudyGroupClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ==================== Auth ====================

    def register(self, session: ClientSession, **fields: Any) -> ClientSession:
        data = self._request("POST", "/auth/register", json=fields)
        return self._sign_in(session, data)

    def login(self, session: ClientSession, email: str, password: str) -> ClientSession:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._sign_in(session, data)

    def me(self, session: ClientSession) -> dict[str, Any]:
        return self._request("GET", "/auth/me", session)["user"]

    def logout(self, session: ClientSession, path: str | None = None) -> None:
        session.clear(path)

    # ==================== Users ====================

    def list_users(self, session: ClientSession, role: str | None = None) -> list[dict[str, Any]]:
        params = {"role": role} if role else None
        return self._request("GET", "/users", session, params=params)["users"]

    # ==================== Projects ====================

    def list_projects(self, session: ClientSession) -> list[dict[str, Any]]:
        return self._request("GET", "/projects", session)["projects"]

    def get_project(self, session: ClientSession, project_id: int) -> dict[str, Any]:
        return self._request("GET", f"/projects/{project_id}", session)["project"]

    def create_project(self, session: ClientSession, **fields: Any) -> dict[str, Any]:
        return self._request("POST", "/projects", session, json=fields)["project"]

    def update_project(self, session: ClientSession, project_id: int, **fields: Any) -> dict[str, Any]:
        return self._request("PUT", f"/projects/{project_id}", session, json=fields)["project"]

    def delete_project(self, session: ClientSession, project_id: int) -> None:
        self._request("DELETE", f"/projects/{project_id}", session)

    def add_member(self, session: ClientSession, project_id: int, member_id: int) -> dict[str, Any]:
        return self._request(
            "POST", f"/projects/{project_id}/members", session, json={"member_id": member_id}
        )["project"]

    def remove_member(self, session: ClientSession, project_id: int, member_id: int) -> dict[str, Any]:
        return self._request("DELETE", f"/projects/{project_id}/members/{member_id}", session)["project"]

    def update_progress(
        self,
        session: ClientSession,
        project_id: int,
        progress: int | None = None,
    ) -> dict[str, Any]:
        return self._request(
            "PUT", f"/projects/{project_id}/progress", session, json={"progress": progress}
        )["project"]

    def upload_project_files(
        self,
        session: ClientSession,
        project_id: int,
        files: Iterable[tuple[str, BinaryIO]],
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/projects/{project_id}/files",
            session,
            files=[("files", f) for f in files],
        )

    # ==================== Tasks ====================

    def list_tasks(self, session: ClientSession, project_id: int | None = None) -> list[dict[str, Any]]:
        params = {"project_id": project_id} if project_id is not None else None
        return self._request("GET", "/tasks", session, params=params)["tasks"]

    def create_task(self, session: ClientSession, project_id: int, **fields: Any) -> dict[str, Any]:
        return self._request("POST", "/tasks", session, json={"project_id": project_id, **fields})["task"]

    def update_task(self, session: ClientSession, task_id: int, **fields: Any) -> dict[str, Any]:
        return self._request("PUT", f"/tasks/{task_id}", session, json=fields)["task"]

    def delete_task(self, session: ClientSession, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}", session)

    # ==================== Submissions ====================

    def list_submissions(self, session: ClientSession, project_id: int | None = None) -> list[dict[str, Any]]:
        params = {"project_id": project_id} if project_id is not None else None
        return self._request("GET", "/submissions", session, params=params)["submissions"]

    def create_submission(
        self,
        session: ClientSession,
        project_id: int,
        files: Iterable[tuple[str, BinaryIO]] = (),
        comments: str | None = None,
    ) -> dict[str, Any]:
        data = {"project_id": str(project_id)}
        if comments:
            data["comments"] = comments
        return self._request(
            "POST",
            "/submissions",
            session,
            data=data,
            files=[("files", f) for f in files] or None,
        )["submission"]

    def review_submission(self, session: ClientSession, submission_id: int, **review: Any) -> dict[str, Any]:
        return self._request("PUT", f"/submissions/{submission_id}", session, json=review)["submission"]

    def delete_submission(self, session: ClientSession, submission_id: int) -> None:
        self._request("DELETE", f"/submissions/{submission_id}", session)

    # ==================== Activities ====================

    def list_activities(self, session: ClientSession, project_id: int) -> list[dict[str, Any]]:
        return self._request("GET", f"/activities/project/{project_id}", session)["activities"]

    # ==================== Internals ====================

    @staticmethod
    def _sign_in(session: ClientSession, data: dict[str, Any]) -> ClientSession:
        session.token = data["token"]
        session.user = data["user"]
        return session

    def _request(
        self,
        method: str,
        url: str,
        session: ClientSession | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = session.auth_headers() if session is not None else {}
        try:
            response = self._http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ClientError(0, "TRANSPORT_ERROR", str(e)) from e

        if response.is_error:
            raise ClientError.from_response(response)
        return response.json()
