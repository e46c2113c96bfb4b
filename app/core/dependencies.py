"""Request-scoped dependencies: the authenticated user and upload storage."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import AuthenticationError
from app.core.security import verify_access_token
from app.models.user import User
from app.services.storage import FileStorage

BEARER_PREFIX = "Bearer "


def _user_id_from_header(authorization: str | None) -> int:
    if not authorization:
        raise AuthenticationError("Not authorized, no token")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Invalid authorization header format")

    claims = verify_access_token(authorization.removeprefix(BEARER_PREFIX))
    if not claims:
        raise AuthenticationError("Invalid or expired token")

    subject = claims.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    try:
        return int(subject)
    except ValueError:
        raise AuthenticationError("Invalid user ID in token")


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    authorization: str | None = Header(None, description="Bearer token"),
) -> User:
    """Resolve the bearer token to an active user."""
    user = db.get(User, _user_id_from_header(authorization))
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


def get_file_storage() -> FileStorage:
    return FileStorage()


CurrentUser = Annotated[User, Depends(get_current_user)]
FileStorageDep = Annotated[FileStorage, Depends(get_file_storage)]
