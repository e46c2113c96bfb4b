"""Submission schemas."""

from datetime import datetime

from pydantic import Field

from app.models.submission import SubmissionStatus
from app.schemas.auth import UserBrief
from app.schemas.common import BaseSchema, StrictSchema
from app.schemas.file import StoredFile
from app.schemas.project import ProjectRef


class SubmissionReview(StrictSchema):
    """Review fields set by faculty or admin."""

    status: SubmissionStatus | None = None
    grade: int | None = Field(None, ge=0, le=100)
    feedback: str | None = None


class SubmissionResponse(BaseSchema):
    """Submission with references expanded."""

    id: int
    project: ProjectRef
    submitted_by: UserBrief
    files: list[StoredFile]
    comments: str | None
    status: SubmissionStatus
    grade: int | None
    feedback: str | None
    reviewed_by: UserBrief | None
    reviewed_at: datetime | None
    submitted_at: datetime


class SubmissionEnvelope(BaseSchema):
    success: bool = True
    submission: SubmissionResponse


class SubmissionListEnvelope(BaseSchema):
    success: bool = True
    count: int
    submissions: list[SubmissionResponse]
