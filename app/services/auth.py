"""Authentication and user directory service."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.document_store import DocumentStore
from app.core.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User, UserRole
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service."""

    def __init__(self, db: Session):
        self.store = DocumentStore(db)

    def register(self, request: RegisterRequest) -> AuthResponse:
        """Register a student or faculty account and sign it in."""
        if request.role == UserRole.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered")

        email = request.email.lower()
        if self._find_by_email(email):
            raise ValidationError("Email already registered")

        user = User(
            name=request.name.strip(),
            email=email,
            password_hash=hash_password(request.password),
            role=request.role,
            student_id=request.student_id,
            department=request.department,
            year=request.year,
            is_active=True,
            groups=[],
        )
        self.store.insert(user)
        logger.info(f"User {user.id} registered as {user.role.value}")
        return self._issue(user)

    def login(self, request: LoginRequest) -> AuthResponse:
        """Authenticate user and return a token."""
        user = self._find_by_email(request.email.lower())

        if not user or not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        return self._issue(user)

    def list_users(self, actor: User, role: UserRole | None = None) -> list[UserResponse]:
        """User directory, used by faculty to pick project members."""
        if actor.role == UserRole.STUDENT:
            raise PermissionDeniedError("Not authorized to list users")
        filters = {"role": role} if role else {}
        users = self.store.find(User, order_by=(User.name, User.id), **filters)
        return [UserResponse.model_validate(u) for u in users]

    def get_user(self, actor: User, user_id: int) -> UserResponse:
        """Users can read themselves; faculty and admins can read anyone."""
        if actor.role == UserRole.STUDENT and actor.id != user_id:
            raise PermissionDeniedError("Not authorized to access this user")
        return UserResponse.model_validate(self.store.get(User, user_id, resource="User"))

    def _find_by_email(self, email: str) -> User | None:
        users = self.store.find(User, func.lower(User.email) == email, limit=1)
        return users[0] if users else None

    @staticmethod
    def _issue(user: User) -> AuthResponse:
        return AuthResponse(
            token=create_access_token(user.id, user.role.value),
            expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        )
