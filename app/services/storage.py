"""Local disk file storage for project and submission uploads."""

import logging
import os
import time
import uuid
from collections.abc import Iterable
from pathlib import Path

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import StorageError, UploadError
from app.schemas.file import StoredFile

logger = logging.getLogger(__name__)


class FileStorage:
    """Stores uploads under ``UPLOAD_DIR/<area>/`` with generated names."""

    def __init__(self, root: str | os.PathLike | None = None):
        self.root = Path(root or settings.UPLOAD_DIR)

    def validate(self, upload: UploadFile) -> str:
        """Check name and extension, returning the lowercased extension."""
        if not upload.filename:
            raise UploadError("No file provided")
        extension = os.path.splitext(upload.filename)[1].lower()
        if extension not in settings.ALLOWED_EXTENSIONS:
            raise UploadError(
                "Invalid file type",
                details={"filename": upload.filename, "allowed": settings.ALLOWED_EXTENSIONS},
            )
        return extension

    def save(self, upload: UploadFile, area: str) -> StoredFile:
        """Persist one upload and return its descriptor."""
        extension = self.validate(upload)
        content = upload.file.read()
        if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
            raise UploadError(
                f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit",
                details={"filename": upload.filename},
            )

        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{extension}"
        storage_path = f"{area}/{stored_name}"
        path = self.root / storage_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            self.delete({"storage_path": storage_path})
            logger.error(f"Could not store {upload.filename} under {area}: {e}")
            raise StorageError(
                "Could not store uploaded file",
                details={"filename": upload.filename, "reason": e.__class__.__name__},
            ) from e
        logger.debug(f"Stored {upload.filename} as {storage_path} ({len(content)} bytes)")

        return StoredFile(
            stored_name=stored_name,
            original_name=upload.filename,
            storage_path=storage_path,
            size=len(content),
            mime_type=upload.content_type,
        )

    def save_all(self, uploads: Iterable[UploadFile], area: str) -> list[StoredFile]:
        """Persist several uploads; already stored files are removed if one fails."""
        uploads = list(uploads)
        if len(uploads) > settings.MAX_FILES_PER_UPLOAD:
            raise UploadError(f"At most {settings.MAX_FILES_PER_UPLOAD} files per upload")
        for upload in uploads:
            self.validate(upload)

        stored: list[StoredFile] = []
        try:
            for upload in uploads:
                stored.append(self.save(upload, area))
        except (UploadError, StorageError):
            self.delete_all(stored)
            raise
        return stored

    def delete(self, descriptor: StoredFile | dict) -> bool:
        """Remove a stored file. Best effort: never raises."""
        storage_path = (
            descriptor.get("storage_path") if isinstance(descriptor, dict) else descriptor.storage_path
        )
        if not storage_path:
            return False
        path = self.root / storage_path
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete stored file {storage_path}: {e}")
            return False

    def delete_all(self, descriptors: Iterable[StoredFile | dict]) -> int:
        return sum(1 for descriptor in descriptors if self.delete(descriptor))
