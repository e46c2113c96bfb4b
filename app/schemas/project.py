"""Project schemas."""

from datetime import datetime

from pydantic import Field

from app.models.project import ProjectStatus
from app.schemas.auth import UserBrief
from app.schemas.common import BaseSchema, StrictSchema
from app.schemas.file import ProjectFile


class ProjectCreate(StrictSchema):
    """Project creation schema."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    faculty_id: int | None = Field(None, description="Owning faculty; admins only, defaults to the creator")
    status: ProjectStatus = ProjectStatus.ACTIVE
    deadline: datetime | None = None


class ProjectUpdate(StrictSchema):
    """Project update schema. Members and progress have their own endpoints."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    status: ProjectStatus | None = None
    deadline: datetime | None = None


class MemberAdd(StrictSchema):
    """Add member request."""

    member_id: int


class ProgressUpdate(StrictSchema):
    """Explicit progress recompute; the override applies only to projects without tasks."""

    progress: int | None = Field(None, ge=0, le=100)


class ProjectRef(BaseSchema):
    """Expanded project reference."""

    id: int
    title: str


class ProjectResponse(BaseSchema):
    """Project with faculty and members expanded."""

    id: int
    title: str
    description: str
    faculty: UserBrief | None
    members: list[UserBrief]
    status: ProjectStatus
    progress: int
    deadline: datetime | None
    files: list[ProjectFile]
    version: int
    created_at: datetime
    updated_at: datetime


class ProjectEnvelope(BaseSchema):
    success: bool = True
    project: ProjectResponse


class ProjectListEnvelope(BaseSchema):
    success: bool = True
    count: int
    projects: list[ProjectResponse]


class ProjectFilesEnvelope(BaseSchema):
    success: bool = True
    files: list[ProjectFile]
    project: ProjectResponse
