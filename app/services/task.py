"""Task management service."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.document_store import DocumentStore
from app.core.exceptions import ValidationError
from app.core.permissions import AccessContext, Capability
from app.models.activity import ActivityType
from app.models.task import Task, TaskStatus
from app.models.user import User, UserRole
from app.schemas.activity import (
    TaskCompletedMetadata,
    TaskCreatedMetadata,
    TaskUpdatedMetadata,
)
from app.schemas.auth import UserBrief
from app.schemas.project import ProjectRef
from app.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from app.services.activity import ActivityService
from app.services.project import ProjectService

logger = logging.getLogger(__name__)

TASK_EXPAND = ("project", "assigned_to")


class TaskService:
    """Task management service.

    Every mutation re-derives the owning project's progress from its full
    task set afterwards.
    """

    def __init__(self, db: Session):
        self.store = DocumentStore(db)
        self.activities = ActivityService(self.store)
        self.projects = ProjectService(db)

    # ==================== Queries ====================

    def get_task(self, actor: User, task_id: int) -> TaskResponse:
        """Get a single task visible to the actor."""
        task = self.store.get(Task, task_id, expand=TASK_EXPAND, resource="Task")
        AccessContext.resolve(actor, project=task.project, task=task).require(
            Capability.TASK_VIEW, "Not authorized to access this task"
        )
        return self.to_response(task)

    def list_tasks(self, actor: User, project_id: int | None = None) -> list[TaskResponse]:
        """List tasks, optionally for one project.

        Students only see tasks assigned to them or belonging to their projects.
        """
        criteria = []
        if project_id is not None:
            criteria.append(Task.project_id == project_id)

        if actor.role == UserRole.STUDENT:
            project_ids = [p.id for p in self.projects.member_projects(actor)]
            criteria.append(or_(Task.assigned_to_id == actor.id, Task.project_id.in_(project_ids)))

        tasks = self.store.find(
            Task,
            *criteria,
            expand=TASK_EXPAND,
            order_by=(Task.created_at.desc(), Task.id.desc()),
        )
        return [self.to_response(task) for task in tasks]

    def list_project_tasks(self, actor: User, project_id: int) -> list[TaskResponse]:
        """All tasks of one project the actor participates in."""
        project = self.projects.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.TASK_VIEW, "Not authorized to access this project"
        )
        tasks = self.store.find(
            Task,
            Task.project_id == project_id,
            expand=TASK_EXPAND,
            order_by=(Task.created_at.desc(), Task.id.desc()),
        )
        return [self.to_response(task) for task in tasks]

    # ==================== Mutations ====================

    def create_task(self, actor: User, request: TaskCreate) -> TaskResponse:
        """Create a task, log it and refresh project progress."""
        project = self.projects.get_project(request.project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.TASK_CREATE, "Not authorized to create tasks for this project"
        )
        self._ensure_user_exists(request.assigned_to_id)

        task = Task(
            project_id=project.id,
            title=request.title,
            description=request.description,
            assigned_to_id=request.assigned_to_id,
            status=request.status,
            priority=request.priority,
            deadline=request.deadline,
        )
        self.store.insert(task)
        logger.info(f"Task {task.id} created in project {project.id} by user {actor.id}")

        self.activities.record(
            project,
            actor.id,
            ActivityType.TASK_CREATED,
            TaskCreatedMetadata(task_id=task.id, task_title=task.title),
        )
        self.projects.recompute_progress(project.id)

        return self.to_response(self.store.get(Task, task.id, expand=TASK_EXPAND, resource="Task"))

    def update_task(self, actor: User, task_id: int, request: TaskUpdate) -> TaskResponse:
        """Update a task, log it (completed when the new status is done) and refresh progress."""
        task = self.store.get(Task, task_id, expand=("project",), resource="Task")
        project = task.project
        AccessContext.resolve(actor, project=project, task=task).require(
            Capability.TASK_UPDATE, "Not authorized to update this task"
        )

        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        required = sorted(k for k in ("title", "status", "priority") if k in changes and changes[k] is None)
        if required:
            raise ValidationError("Field(s) cannot be cleared", details={"fields": required})
        if "assigned_to_id" in changes:
            self._ensure_user_exists(changes["assigned_to_id"])
        self.store.update(task, changes)

        if changes.get("status") == TaskStatus.DONE:
            metadata = TaskCompletedMetadata(task_id=task.id, task_title=task.title)
            activity_type = ActivityType.TASK_COMPLETED
        else:
            metadata = TaskUpdatedMetadata(task_id=task.id, task_title=task.title, status=task.status)
            activity_type = ActivityType.TASK_UPDATED
        self.activities.record(project, actor.id, activity_type, metadata)

        self.projects.recompute_progress(project.id)

        return self.to_response(self.store.get(Task, task.id, expand=TASK_EXPAND, resource="Task"))

    def delete_task(self, actor: User, task_id: int) -> None:
        """Delete a task and refresh progress. Deletions are not logged as activity."""
        task = self.store.get(Task, task_id, expand=("project",), resource="Task")
        project = task.project
        AccessContext.resolve(actor, project=project, task=task).require(
            Capability.TASK_DELETE, "Not authorized to delete this task"
        )

        self.store.delete_by_id(Task, task.id)
        logger.info(f"Task {task.id} deleted from project {project.id} by user {actor.id}")

        self.projects.recompute_progress(project.id)

    # ==================== Helpers ====================

    def _ensure_user_exists(self, user_id: int | None) -> None:
        if user_id is not None:
            self.store.get(User, user_id, resource="User")

    @staticmethod
    def to_response(task: Task) -> TaskResponse:
        return TaskResponse(
            id=task.id,
            title=task.title,
            description=task.description,
            project=ProjectRef.model_validate(task.project),
            assigned_to=UserBrief.model_validate(task.assigned_to) if task.assigned_to else None,
            status=task.status,
            priority=task.priority,
            deadline=task.deadline,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
