"""
Test configuration and fixtures.

Every test runs against a fresh in-memory SQLite database shared by the
test code and the app through a single session.
"""
import itertools
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.database import Base, get_db
from app.core.dependencies import get_file_storage
from app.core.security import create_access_token, hash_password
from app.main import app as fastapi_app
from app.models.project import Project, ProjectStatus
from app.models.user import User, UserRole
from app.services.storage import FileStorage

PASSWORD = "password123"


@pytest.fixture
def engine():
    """Create a test database engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    """Create a test database session."""
    session = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "uploads")


@pytest.fixture
def client(db, storage):
    """Create a test client with database session and storage overrides."""
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_file_storage] = lambda: storage
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role: UserRole = UserRole.STUDENT, name: str | None = None, **fields) -> User:
        n = next(counter)
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value}{n}@school.edu",
            password_hash=hash_password(PASSWORD),
            role=role,
            is_active=True,
            groups=[],
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def student(make_user) -> User:
    return make_user(UserRole.STUDENT, name="Alice Student", student_id="S-001")


@pytest.fixture
def other_student(make_user) -> User:
    return make_user(UserRole.STUDENT, name="Bob Student", student_id="S-002")


@pytest.fixture
def faculty(make_user) -> User:
    return make_user(UserRole.FACULTY, name="Dr. Faculty")


@pytest.fixture
def other_faculty(make_user) -> User:
    return make_user(UserRole.FACULTY, name="Dr. Elsewhere")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, name="Admin")


@pytest.fixture
def make_project(db):
    def _make(faculty: User, members: list[User] = (), title: str = "Capstone") -> Project:
        project = Project(
            title=title,
            description="Semester group project",
            faculty_id=faculty.id,
            members=[m.id for m in members],
            status=ProjectStatus.ACTIVE,
            progress=0,
            files=[],
        )
        db.add(project)
        db.commit()
        for member in members:
            member.groups = [*member.groups, project.id]
        db.commit()
        return project

    return _make


@pytest.fixture
def project(make_project, faculty, student) -> Project:
    """Project owned by ``faculty`` with ``student`` as its only member."""
    return make_project(faculty, members=[student])


@pytest.fixture
def auth():
    """Build Authorization headers for a user."""
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}

    return _headers
