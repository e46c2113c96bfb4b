"""Activity schemas.

Activity metadata is a union tagged by the activity type; each type carries
exactly one payload shape.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from app.models.activity import ActivityType
from app.models.submission import SubmissionStatus
from app.models.task import TaskStatus
from app.schemas.auth import UserBrief
from app.schemas.common import BaseSchema


class TaskCreatedMetadata(BaseSchema):
    type: Literal["task-created"] = "task-created"
    task_id: int
    task_title: str


class TaskUpdatedMetadata(BaseSchema):
    type: Literal["task-updated"] = "task-updated"
    task_id: int
    task_title: str
    status: TaskStatus


class TaskCompletedMetadata(BaseSchema):
    type: Literal["task-completed"] = "task-completed"
    task_id: int
    task_title: str
    status: TaskStatus = TaskStatus.DONE


class MemberAddedMetadata(BaseSchema):
    type: Literal["member-added"] = "member-added"
    member_id: int
    member_name: str


class FileUploadedMetadata(BaseSchema):
    type: Literal["file-uploaded"] = "file-uploaded"
    file_count: int = Field(..., ge=1)


class SubmissionCreatedMetadata(BaseSchema):
    type: Literal["submission-created"] = "submission-created"
    submission_id: int


class FeedbackAddedMetadata(BaseSchema):
    type: Literal["feedback-added"] = "feedback-added"
    submission_id: int
    status: SubmissionStatus
    grade: int | None = None


class ProjectUpdatedMetadata(BaseSchema):
    type: Literal["project-updated"] = "project-updated"
    action: Literal["created", "updated"]
    changes: dict[str, Any] = {}


ActivityMetadata = Annotated[
    Union[
        TaskCreatedMetadata,
        TaskUpdatedMetadata,
        TaskCompletedMetadata,
        MemberAddedMetadata,
        FileUploadedMetadata,
        SubmissionCreatedMetadata,
        FeedbackAddedMetadata,
        ProjectUpdatedMetadata,
    ],
    Field(discriminator="type"),
]

activity_metadata_adapter: TypeAdapter[ActivityMetadata] = TypeAdapter(ActivityMetadata)


class ActivityResponse(BaseSchema):
    """Activity with the actor expanded."""

    id: int
    project_id: int
    user: UserBrief | None
    type: ActivityType
    description: str
    metadata: ActivityMetadata | None = None
    created_at: datetime


class ActivityListEnvelope(BaseSchema):
    success: bool = True
    count: int
    activities: list[ActivityResponse]
