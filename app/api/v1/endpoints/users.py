"""User directory endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser
from app.models.user import UserRole
from app.schemas.auth import UserEnvelope, UserListEnvelope
from app.services.auth import AuthService

router = APIRouter()


@router.get("", response_model=UserListEnvelope)
def list_users(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    role: UserRole | None = Query(None, description="Filter by role"),
):
    """
    List users. Faculty and admins only.
    """
    service = AuthService(db)
    users = service.list_users(current_user, role=role)
    return UserListEnvelope(count=len(users), users=users)


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a user by ID.
    """
    service = AuthService(db)
    return UserEnvelope(user=service.get_user(current_user, user_id))
