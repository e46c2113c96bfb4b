"""Project management endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser, FileStorageDep
from app.schemas.common import MessageResponse
from app.schemas.project import (
    MemberAdd,
    ProgressUpdate,
    ProjectCreate,
    ProjectEnvelope,
    ProjectFilesEnvelope,
    ProjectListEnvelope,
    ProjectUpdate,
)
from app.services.project import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProjectListEnvelope)
def list_projects(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    List projects visible to the current user.

    - Students: projects they are a member of
    - Faculty: projects they own
    - Admins: all projects
    """
    service = ProjectService(db, storage)
    projects = service.list_projects(current_user)
    return ProjectListEnvelope(count=len(projects), projects=projects)


@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
def create_project(
    request: ProjectCreate,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Create a new project. Faculty and admins only.
    """
    service = ProjectService(db, storage)
    return ProjectEnvelope(project=service.create_project(current_user, request))


@router.get("/{project_id}", response_model=ProjectEnvelope)
def get_project(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Get a project with faculty and members expanded.
    """
    service = ProjectService(db, storage)
    return ProjectEnvelope(project=service.view_project(current_user, project_id))


@router.put("/{project_id}", response_model=ProjectEnvelope)
def update_project(
    project_id: int,
    request: ProjectUpdate,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Update project details. Owning faculty or admins only.
    """
    service = ProjectService(db, storage)
    return ProjectEnvelope(project=service.update_project(current_user, project_id, request))


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Delete a project together with its tasks, submissions and activity.
    """
    service = ProjectService(db, storage)
    title = service.delete_project(current_user, project_id)
    return MessageResponse(message=f"Project '{title}' deleted")


@router.post("/{project_id}/members", response_model=ProjectEnvelope)
def add_member(
    project_id: int,
    request: MemberAdd,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Add a member to the project.
    """
    service = ProjectService(db, storage)
    return ProjectEnvelope(project=service.add_member(current_user, project_id, request.member_id))


@router.delete("/{project_id}/members/{member_id}", response_model=ProjectEnvelope)
def remove_member(
    project_id: int,
    member_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Remove a member from the project.
    """
    service = ProjectService(db, storage)
    return ProjectEnvelope(project=service.remove_member(current_user, project_id, member_id))


@router.put("/{project_id}/progress", response_model=ProjectEnvelope)
def update_progress(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
    request: ProgressUpdate | None = None,
):
    """
    Recompute project progress from its tasks.

    A supplied progress value is only used while the project has no tasks.
    """
    service = ProjectService(db, storage)
    override = request.progress if request else None
    return ProjectEnvelope(project=service.update_progress(current_user, project_id, override))


@router.post("/{project_id}/files", response_model=ProjectFilesEnvelope, status_code=status.HTTP_201_CREATED)
def upload_files(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
    files: list[UploadFile] = File(...),
):
    """
    Upload files to a project.
    """
    service = ProjectService(db, storage)
    attached, project = service.attach_files(current_user, project_id, files)
    logger.info(f"{len(attached)} file(s) uploaded to project {project_id}")
    return ProjectFilesEnvelope(files=attached, project=project)
