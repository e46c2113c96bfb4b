"""Task schemas."""

from datetime import datetime

from pydantic import Field

from app.models.task import TaskPriority, TaskStatus
from app.schemas.auth import UserBrief
from app.schemas.common import BaseSchema, StrictSchema
from app.schemas.project import ProjectRef


class TaskCreate(StrictSchema):
    """Task creation schema."""

    project_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    assigned_to_id: int | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    deadline: datetime | None = None


class TaskUpdate(StrictSchema):
    """Task update schema. The owning project cannot change."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    assigned_to_id: int | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    deadline: datetime | None = None


class TaskResponse(BaseSchema):
    """Task with project and assignee expanded."""

    id: int
    title: str
    description: str | None
    project: ProjectRef
    assigned_to: UserBrief | None
    status: TaskStatus
    priority: TaskPriority
    deadline: datetime | None
    created_at: datetime
    updated_at: datetime


class TaskEnvelope(BaseSchema):
    success: bool = True
    task: TaskResponse


class TaskListEnvelope(BaseSchema):
    success: bool = True
    count: int
    tasks: list[TaskResponse]
