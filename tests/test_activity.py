"""Activity payload and recorder tests."""
import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.document_store import DocumentStore
from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models.activity import Activity, ActivityType
from app.models.submission import SubmissionStatus
from app.schemas.activity import (
    FeedbackAddedMetadata,
    MemberAddedMetadata,
    ProjectUpdatedMetadata,
    TaskCompletedMetadata,
    TaskCreatedMetadata,
    activity_metadata_adapter,
)
from app.services.activity import DESCRIPTION_TEMPLATES, ActivityService, describe


def test_metadata_union_dispatches_on_type():
    payload = activity_metadata_adapter.validate_python(
        {"type": "feedback-added", "submission_id": 4, "status": "approved", "grade": 88}
    )
    assert isinstance(payload, FeedbackAddedMetadata)
    assert payload.status == SubmissionStatus.APPROVED


def test_metadata_union_rejects_mismatched_shape():
    with pytest.raises(PydanticValidationError):
        activity_metadata_adapter.validate_python({"type": "member-added", "task_id": 1})

    with pytest.raises(PydanticValidationError):
        activity_metadata_adapter.validate_python({"type": "unknown"})


def test_file_count_must_be_positive():
    with pytest.raises(PydanticValidationError):
        activity_metadata_adapter.validate_python({"type": "file-uploaded", "file_count": 0})


def test_every_type_has_a_template():
    assert set(DESCRIPTION_TEMPLATES) == set(ActivityType)


def test_descriptions(project):
    assert describe(project, TaskCreatedMetadata(task_id=1, task_title="Intro")) == 'Task "Intro" was created'
    assert describe(project, MemberAddedMetadata(member_id=2, member_name="Bob")) == "Bob was added to the project"
    assert describe(project, ProjectUpdatedMetadata(action="created")) == f'Project "{project.title}" was created'


def test_record_refuses_payload_for_other_type(db, project, student):
    service = ActivityService(DocumentStore(db))

    with pytest.raises(ValidationError):
        service.record(project, student.id, ActivityType.TASK_UPDATED, TaskCompletedMetadata(task_id=1, task_title="x"))

    assert DocumentStore(db).find(Activity) == []


def test_feed_is_newest_first_and_limited(db, project, student, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "ACTIVITY_FEED_LIMIT", 3)
    service = ActivityService(DocumentStore(db))
    for i in range(5):
        service.record(project, student.id, ActivityType.TASK_CREATED, TaskCreatedMetadata(task_id=i, task_title=f"t{i}"))

    feed = service.list_for_project(student, project.id)

    assert [a.metadata.task_id for a in feed] == [4, 3, 2]
    assert feed[0].user.id == student.id


def test_feed_requires_participation(db, project, other_student):
    with pytest.raises(PermissionDeniedError):
        ActivityService(DocumentStore(db)).list_for_project(other_student, project.id)
