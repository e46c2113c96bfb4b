"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from app.services.auth import AuthService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Register a student or faculty account.

    Returns a token so the client is signed in right away.
    """
    service = AuthService(db)
    return service.register(request)


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Authenticate with email and password and return an access token.
    """
    service = AuthService(db)
    return service.login(request)


@router.get("/me", response_model=UserEnvelope)
def get_current_user_info(current_user: CurrentUser):
    """
    Get the current authenticated user.
    """
    return UserEnvelope(user=UserResponse.model_validate(current_user))
