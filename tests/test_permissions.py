"""Capability resolution and authorization gate tests."""
import pytest

from app.core.exceptions import PermissionDeniedError
from app.core.permissions import (
    AccessContext,
    Capability,
    FACULTY_OWNER,
    MEMBER,
    authorize,
    resolve_capabilities,
)
from app.models.project import Project
from app.models.submission import Submission
from app.models.task import Task
from app.models.user import User, UserRole


def user(user_id: int, role: UserRole) -> User:
    return User(id=user_id, name=f"user {user_id}", email=f"u{user_id}@school.edu", role=role)


STUDENT = user(1, UserRole.STUDENT)
MEMBER_STUDENT = user(2, UserRole.STUDENT)
OWNER = user(3, UserRole.FACULTY)
OTHER_FACULTY = user(4, UserRole.FACULTY)
ADMIN = user(5, UserRole.ADMIN)

PROJECT = Project(id=10, title="P", description="d", faculty_id=OWNER.id, members=[MEMBER_STUDENT.id])


def test_without_project_only_creation_is_resolved():
    assert resolve_capabilities(STUDENT) == frozenset()
    assert resolve_capabilities(OWNER) == {Capability.PROJECT_CREATE}
    assert resolve_capabilities(ADMIN) == {Capability.PROJECT_CREATE}


def test_non_member_student_has_nothing_on_project():
    assert resolve_capabilities(STUDENT, PROJECT) == frozenset()


def test_member_can_work_but_not_manage():
    caps = resolve_capabilities(MEMBER_STUDENT, PROJECT)
    assert caps == MEMBER
    assert Capability.TASK_CREATE in caps
    assert Capability.TASK_DELETE not in caps
    assert Capability.MEMBER_MANAGE not in caps
    assert Capability.SUBMISSION_REVIEW not in caps


def test_owning_faculty_manages_project():
    caps = resolve_capabilities(OWNER, PROJECT)
    assert FACULTY_OWNER <= caps
    assert Capability.SUBMISSION_CREATE not in caps


def test_other_faculty_has_no_project_access():
    assert resolve_capabilities(OTHER_FACULTY, PROJECT) == {Capability.PROJECT_CREATE}


def test_admin_has_every_capability():
    assert resolve_capabilities(ADMIN, PROJECT) == frozenset(Capability)


def test_assignee_outside_project_can_view_and_update_task():
    task = Task(id=20, project_id=PROJECT.id, title="t", assigned_to_id=STUDENT.id)
    caps = resolve_capabilities(STUDENT, PROJECT, task=task)
    assert caps == {Capability.TASK_VIEW, Capability.TASK_UPDATE}


def test_student_becomes_able_to_create_tasks_once_added():
    project = Project(id=11, title="P", description="d", faculty_id=OWNER.id, members=[])
    with pytest.raises(PermissionDeniedError):
        AccessContext.resolve(STUDENT, project).require(Capability.TASK_CREATE)

    project.members = [STUDENT.id]
    AccessContext.resolve(STUDENT, project).require(Capability.TASK_CREATE)


@pytest.mark.parametrize("submitter", [OWNER, ADMIN])
def test_submitter_can_never_review_own_submission(submitter):
    project = Project(id=12, title="P", description="d", faculty_id=OWNER.id, members=[OWNER.id, ADMIN.id])
    submission = Submission(id=30, project_id=project.id, submitted_by_id=submitter.id)

    access = AccessContext.resolve(submitter, project, submission=submission)

    assert not access.can(Capability.SUBMISSION_REVIEW)
    assert access.can(Capability.SUBMISSION_VIEW)
    assert access.can(Capability.SUBMISSION_DELETE)


def test_owner_reviews_member_submission():
    submission = Submission(id=31, project_id=PROJECT.id, submitted_by_id=MEMBER_STUDENT.id)
    assert AccessContext.resolve(OWNER, PROJECT, submission=submission).can(Capability.SUBMISSION_REVIEW)


def test_authorize_raises_forbidden_with_required_permission():
    with pytest.raises(PermissionDeniedError) as exc_info:
        authorize(frozenset(), Capability.PROJECT_DELETE, "nope")

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "nope"
    assert exc_info.value.details == {"required_permission": "project:delete"}
