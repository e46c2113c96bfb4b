"""Application error taxonomy.

Every error renders the same envelope:
``{"success": false, "error": {"code", "message", "details"}}``.
"""

from typing import Any

from fastapi import HTTPException, status


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the error envelope returned for every failed request."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    }


class AppException(HTTPException):
    """Base application exception.

    Subclasses set ``http_status``, ``code`` and ``default_message``.
    """

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_message: str = "An internal server error occurred"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(
            status_code=self.http_status,
            detail=error_body(self.code, self.message, self.details),
        )


class ValidationError(AppException):
    """Missing or malformed input; nothing was written."""

    http_status = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class UploadError(AppException):
    """Rejected file upload."""

    http_status = status.HTTP_400_BAD_REQUEST
    code = "UPLOAD_FAILED"
    default_message = "Upload failed"


class AuthenticationError(AppException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_FAILED"
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None):
        super().__init__(message)


class PermissionDeniedError(AppException):
    """The authorization gate rejected the action."""

    http_status = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    default_message = "Permission denied"

    def __init__(
        self,
        message: str | None = None,
        required_permission: str | None = None,
    ):
        details = {"required_permission": required_permission} if required_permission else None
        super().__init__(message, details)


class NotFoundError(AppException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {"identifier": identifier} if identifier else None
        super().__init__(f"{resource} not found", details)


class ConflictError(AppException):
    """A versioned document changed between read and write."""

    http_status = status.HTTP_409_CONFLICT
    code = "CONFLICT"

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
    ):
        details = {"identifier": identifier} if identifier else None
        super().__init__(f"{resource} was modified concurrently, retry the request", details)


class StorageError(AppException):
    """The document store failed to read or write."""

    code = "STORAGE_FAILURE"
    default_message = "Storage operation failed"
