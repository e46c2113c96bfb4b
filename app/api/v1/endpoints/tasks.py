"""Task management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser
from app.schemas.common import MessageResponse
from app.schemas.task import TaskCreate, TaskEnvelope, TaskListEnvelope, TaskUpdate
from app.services.task import TaskService

router = APIRouter()


@router.get("", response_model=TaskListEnvelope)
def list_tasks(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    project_id: int | None = Query(None, description="Filter by project"),
):
    """
    List tasks, newest first.

    Students only see tasks assigned to them or in their projects.
    """
    service = TaskService(db)
    tasks = service.list_tasks(current_user, project_id=project_id)
    return TaskListEnvelope(count=len(tasks), tasks=tasks)


@router.get("/project/{project_id}", response_model=TaskListEnvelope)
def list_project_tasks(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    List all tasks of a project.
    """
    service = TaskService(db)
    tasks = service.list_project_tasks(current_user, project_id)
    return TaskListEnvelope(count=len(tasks), tasks=tasks)


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a task by ID.
    """
    service = TaskService(db)
    return TaskEnvelope(task=service.get_task(current_user, task_id))


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreate,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Create a task in a project and refresh the project's progress.
    """
    service = TaskService(db)
    return TaskEnvelope(task=service.create_task(current_user, request))


@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: int,
    request: TaskUpdate,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Update a task. The owning project cannot be changed.
    """
    service = TaskService(db)
    return TaskEnvelope(task=service.update_task(current_user, task_id, request))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Delete a task.
    """
    service = TaskService(db)
    service.delete_task(current_user, task_id)
    return MessageResponse(message="Task deleted")
