"""HTTP API tests."""
from app.core.config import settings

API = settings.API_V1_PREFIX


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ==================== Auth ====================


def test_register_login_and_me(client):
    response = client.post(f"{API}/auth/register", json={
        "name": "Carol Student",
        "email": "Carol@school.edu",
        "password": "secret123",
        "student_id": "S-100",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["role"] == "student"
    assert body["user"]["email"] == "carol@school.edu"

    login = client.post(f"{API}/auth/login", json={"email": "carol@school.edu", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["name"] == "Carol Student"


def test_register_rejects_duplicate_email_and_admin_role(client, student):
    duplicate = client.post(f"{API}/auth/register", json={
        "name": "Again", "email": student.email, "password": "secret123",
    })
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["code"] == "VALIDATION_ERROR"

    admin = client.post(f"{API}/auth/register", json={
        "name": "Mallory", "email": "mallory@school.edu", "password": "secret123", "role": "admin",
    })
    assert admin.status_code == 400


def test_login_with_wrong_password(client, student):
    response = client.post(f"{API}/auth/login", json={"email": student.email, "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"code": "AUTH_FAILED", "message": "Invalid email or password", "details": {}},
    }


def test_requests_without_token_are_rejected(client):
    response = client.get(f"{API}/projects")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_request_id_header_is_echoed(client, auth, student):
    response = client.get(f"{API}/auth/me", headers={**auth(student), "X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


# ==================== Users ====================


def test_user_directory_for_faculty_only(client, auth, faculty, student, other_student):
    response = client.get(f"{API}/users", params={"role": "student"}, headers=auth(faculty))
    assert response.status_code == 200
    assert response.json()["count"] == 2

    assert client.get(f"{API}/users", headers=auth(student)).status_code == 403
    assert client.get(f"{API}/users/{student.id}", headers=auth(student)).status_code == 200
    assert client.get(f"{API}/users/{other_student.id}", headers=auth(student)).status_code == 403


# ==================== Projects ====================


def test_project_lifecycle(client, auth, faculty, student):
    created = client.post(f"{API}/projects", headers=auth(faculty), json={
        "title": "Compiler",
        "description": "Write a toy compiler",
    })
    assert created.status_code == 201
    project = created.json()["project"]
    assert project["faculty"]["id"] == faculty.id
    assert project["members"] == []

    added = client.post(
        f"{API}/projects/{project['id']}/members", headers=auth(faculty), json={"member_id": student.id}
    )
    assert added.status_code == 200
    assert [m["id"] for m in added.json()["project"]["members"]] == [student.id]

    duplicate = client.post(
        f"{API}/projects/{project['id']}/members", headers=auth(faculty), json={"member_id": student.id}
    )
    assert duplicate.status_code == 400

    listed = client.get(f"{API}/projects", headers=auth(student)).json()
    assert listed["count"] == 1

    updated = client.put(f"{API}/projects/{project['id']}", headers=auth(faculty), json={"status": "completed"})
    assert updated.json()["project"]["status"] == "completed"

    deleted = client.delete(f"{API}/projects/{project['id']}", headers=auth(faculty))
    assert deleted.json() == {"success": True, "message": "Project 'Compiler' deleted"}
    assert client.get(f"{API}/projects/{project['id']}", headers=auth(faculty)).status_code == 404


def test_student_cannot_create_project(client, auth, student):
    response = client.post(f"{API}/projects", headers=auth(student), json={"title": "x", "description": "y"})
    assert response.status_code == 403
    assert response.json()["error"]["details"] == {"required_permission": "project:create"}


def test_body_validation_errors_are_400(client, auth, faculty):
    response = client.post(f"{API}/projects", headers=auth(faculty), json={"description": "no title"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_non_participant_cannot_view_project(client, auth, project, other_student):
    response = client.get(f"{API}/projects/{project.id}", headers=auth(other_student))
    assert response.status_code == 403


def test_progress_endpoint(client, auth, project, student):
    response = client.put(f"{API}/projects/{project.id}/progress", headers=auth(student), json={"progress": 30})
    assert response.status_code == 200
    assert response.json()["project"]["progress"] == 30


def test_upload_project_files(client, auth, project, student):
    response = client.post(
        f"{API}/projects/{project.id}/files",
        headers=auth(student),
        files=[("files", ("notes.txt", b"hello", "text/plain"))],
    )
    assert response.status_code == 201
    body = response.json()
    assert body["files"][0]["original_name"] == "notes.txt"
    assert body["files"][0]["mime_type"] == "text/plain"
    assert len(body["project"]["files"]) == 1


def test_upload_rejects_disallowed_extension(client, auth, project, student):
    response = client.post(
        f"{API}/projects/{project.id}/files",
        headers=auth(student),
        files=[("files", ("run.exe", b"MZ", "application/octet-stream"))],
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UPLOAD_FAILED"


# ==================== Tasks ====================


def test_task_flow_updates_progress_and_feed(client, auth, project, student):
    created = client.post(f"{API}/tasks", headers=auth(student), json={
        "project_id": project.id,
        "title": "Lexer",
        "assigned_to_id": student.id,
    })
    assert created.status_code == 201
    task = created.json()["task"]
    assert task["project"] == {"id": project.id, "title": project.title}
    assert task["status"] == "todo"

    done = client.put(f"{API}/tasks/{task['id']}", headers=auth(student), json={"status": "done"})
    assert done.status_code == 200

    project_body = client.get(f"{API}/projects/{project.id}", headers=auth(student)).json()["project"]
    assert project_body["progress"] == 100

    feed = client.get(f"{API}/activities/project/{project.id}", headers=auth(student)).json()
    assert [a["type"] for a in feed["activities"]] == ["task-completed", "task-created"]
    assert feed["activities"][0]["description"] == 'Task "Lexer" was completed'
    assert feed["activities"][0]["metadata"]["task_id"] == task["id"]

    listed = client.get(f"{API}/tasks", params={"project_id": project.id}, headers=auth(student)).json()
    assert listed["count"] == 1


def test_task_project_cannot_be_changed(client, auth, project, student, faculty):
    task = client.post(f"{API}/tasks", headers=auth(student), json={"project_id": project.id, "title": "t"}).json()["task"]

    response = client.put(f"{API}/tasks/{task['id']}", headers=auth(faculty), json={"project_id": 999})
    assert response.status_code == 400


def test_delete_last_task_resets_progress(client, auth, project, faculty):
    task = client.post(f"{API}/tasks", headers=auth(faculty), json={
        "project_id": project.id, "title": "t", "status": "done",
    }).json()["task"]

    assert client.delete(f"{API}/tasks/{task['id']}", headers=auth(faculty)).status_code == 200
    project_body = client.get(f"{API}/projects/{project.id}", headers=auth(faculty)).json()["project"]
    assert project_body["progress"] == 0


def test_missing_task_is_404(client, auth, student):
    response = client.get(f"{API}/tasks/12345", headers=auth(student))
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Task not found"


# ==================== Submissions ====================


def test_submission_create_and_review(client, auth, project, student, faculty):
    created = client.post(
        f"{API}/submissions",
        headers=auth(student),
        data={"project_id": str(project.id), "comments": "Final report"},
        files=[("files", ("report.pdf", b"%PDF", "application/pdf"))],
    )
    assert created.status_code == 201
    submission = created.json()["submission"]
    assert submission["status"] == "pending"
    assert submission["files"][0]["original_name"] == "report.pdf"

    self_review = client.put(f"{API}/submissions/{submission['id']}", headers=auth(student), json={"grade": 100})
    assert self_review.status_code == 403

    reviewed = client.put(f"{API}/submissions/{submission['id']}", headers=auth(faculty), json={
        "status": "needs-revision", "grade": 70, "feedback": "Add references",
    })
    assert reviewed.status_code == 200
    assert reviewed.json()["submission"]["reviewed_by"]["id"] == faculty.id

    out_of_range = client.put(f"{API}/submissions/{submission['id']}", headers=auth(faculty), json={"grade": 101})
    assert out_of_range.status_code == 400

    listed = client.get(f"{API}/submissions", headers=auth(faculty)).json()
    assert listed["count"] == 1


# ==================== Activities ====================


def test_activities_require_project_id(client, auth, student):
    response = client.get(f"{API}/activities", headers=auth(student))
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Project ID is required"


def test_activities_hidden_from_non_participants(client, auth, project, other_student):
    response = client.get(f"{API}/activities", params={"project_id": project.id}, headers=auth(other_student))
    assert response.status_code == 403
