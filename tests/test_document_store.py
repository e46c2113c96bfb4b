"""Document store tests."""
import pytest
from sqlalchemy import update

from app.core.document_store import DocumentStore
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.project import Project, ProjectStatus
from app.models.task import Task, TaskStatus


@pytest.fixture
def store(db) -> DocumentStore:
    return DocumentStore(db)


def test_insert_assigns_id_and_initial_version(store, faculty):
    project = store.insert(Project(title="P", description="d", faculty_id=faculty.id, members=[], files=[]))

    assert project.id is not None
    assert project.version == 1
    assert store.find_by_id(Project, project.id).title == "P"


def test_get_missing_document_raises_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        store.get(Project, 999, resource="Project")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Project not found"


def test_update_bumps_version(store, project):
    before = project.version
    store.update(project, {"title": "Renamed"})

    reloaded = store.get(Project, project.id)
    assert reloaded.title == "Renamed"
    assert reloaded.version == before + 1


def test_update_rejects_immutable_field(store, project, make_project, faculty):
    task = store.insert(Task(project_id=project.id, title="t"))
    elsewhere = make_project(faculty, title="Elsewhere")

    with pytest.raises(ValidationError) as exc_info:
        store.update(task, {"project_id": elsewhere.id})

    assert exc_info.value.details == {"fields": ["project_id"]}
    assert store.get(Task, task.id).project_id == project.id


def test_update_rejects_unknown_field(store, project):
    with pytest.raises(ValidationError):
        store.update(project, {"owner": 1})


def test_stale_version_raises_conflict(store, db, project):
    # Another writer bumps the version behind this session's back
    table = Project.__table__
    db.execute(update(table).where(table.c.id == project.id).values(version=table.c.version + 1))
    db.commit()

    with pytest.raises(ConflictError) as exc_info:
        store.update(project, {"progress": 50})

    assert exc_info.value.status_code == 409
    assert store.get(Project, project.id).progress == 0


def test_find_with_filters_order_and_expand(store, project, student):
    store.insert(Task(project_id=project.id, title="first", assigned_to_id=student.id))
    store.insert(Task(project_id=project.id, title="second", status=TaskStatus.DONE))

    done = store.find(Task, status=TaskStatus.DONE)
    assert [t.title for t in done] == ["second"]

    tasks = store.find(Task, Task.project_id == project.id, expand=("assigned_to",), order_by=(Task.id.desc(),))
    assert [t.title for t in tasks] == ["second", "first"]
    assert tasks[1].assigned_to.name == student.name


def test_delete_many_returns_count(store, project):
    for title in ("a", "b", "c"):
        store.insert(Task(project_id=project.id, title=title))

    assert store.delete_many(Task, Task.project_id == project.id) == 3
    assert store.find(Task) == []


def test_expand_users_skips_missing_ids(store, student, faculty):
    users = store.expand_users([student.id, faculty.id, None, 12345])
    assert set(users) == {student.id, faculty.id}


def test_update_by_id_loads_and_patches(store, project):
    store.update_by_id(Project, project.id, {"status": ProjectStatus.ARCHIVED})
    assert store.get(Project, project.id).status == ProjectStatus.ARCHIVED


def test_delete_by_id(store, project):
    task = store.insert(Task(project_id=project.id, title="gone"))
    store.delete_by_id(Task, task.id)
    assert store.find_by_id(Task, task.id) is None
