"""Stored file descriptors."""

from datetime import datetime

from app.schemas.common import BaseSchema


class StoredFile(BaseSchema):
    """A file already persisted by the file storage."""

    stored_name: str
    original_name: str
    storage_path: str
    size: int
    mime_type: str | None = None


class ProjectFile(StoredFile):
    """A file attached to a project."""

    uploaded_by: int
    uploaded_at: datetime
