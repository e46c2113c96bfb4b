"""Project management service."""

import logging
from datetime import datetime, timezone

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.document_store import DocumentStore
from app.core.exceptions import AppException, ConflictError, ValidationError
from app.core.permissions import AccessContext, Capability
from app.models.activity import Activity, ActivityType
from app.models.project import Project
from app.models.submission import Submission
from app.models.task import Task
from app.models.user import User, UserRole
from app.schemas.activity import (
    FileUploadedMetadata,
    MemberAddedMetadata,
    ProjectUpdatedMetadata,
)
from app.schemas.auth import UserBrief
from app.schemas.file import ProjectFile
from app.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from app.services.activity import ActivityService
from app.services.progress import task_ratio_progress
from app.services.storage import FileStorage

logger = logging.getLogger(__name__)


class ProjectService:
    """Project management service."""

    def __init__(self, db: Session, storage: FileStorage | None = None):
        self.store = DocumentStore(db)
        self.activities = ActivityService(self.store)
        self.storage = storage or FileStorage()

    # ==================== Queries ====================

    def get_project(self, project_id: int) -> Project:
        """Get project by ID."""
        return self.store.get(Project, project_id, resource="Project")

    def view_project(self, actor: User, project_id: int) -> ProjectResponse:
        """Get a project the actor participates in."""
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.PROJECT_VIEW, "Not authorized to access this project"
        )
        return self.to_response(project)

    def list_projects(self, actor: User) -> list[ProjectResponse]:
        """Students see their groups, faculty their own projects, admins everything."""
        order = (Project.created_at.desc(), Project.id.desc())
        if actor.role == UserRole.FACULTY:
            projects = self.store.find(Project, Project.faculty_id == actor.id, order_by=order)
        elif actor.role == UserRole.STUDENT:
            projects = self.member_projects(actor, order_by=order)
        else:
            projects = self.store.find(Project, order_by=order)
        return self.to_responses(projects)

    def member_projects(self, actor: User, order_by=()) -> list[Project]:
        """Projects listing the actor as a member.

        Candidates come from the actor's groups; the project's own member
        list stays authoritative.
        """
        if not actor.groups:
            return []
        candidates = self.store.find(Project, Project.id.in_(actor.groups), order_by=order_by)
        return [p for p in candidates if actor.id in p.members]

    # ==================== Mutations ====================

    def create_project(self, actor: User, request: ProjectCreate) -> ProjectResponse:
        """Create a project owned by the acting faculty member (or the chosen faculty for admins)."""
        AccessContext.resolve(actor).require(Capability.PROJECT_CREATE, "Students cannot create projects")

        faculty_id = actor.id
        if actor.role == UserRole.ADMIN and request.faculty_id:
            faculty = self.store.get(User, request.faculty_id, resource="User")
            if faculty.role == UserRole.STUDENT:
                raise ValidationError("Project faculty must be a faculty member or admin")
            faculty_id = faculty.id

        project = Project(
            title=request.title,
            description=request.description,
            faculty_id=faculty_id,
            members=[],
            status=request.status,
            progress=0,
            deadline=request.deadline,
            files=[],
        )
        self.store.insert(project)
        logger.info(f"Project {project.id} created by user {actor.id}")

        self.activities.record(
            project,
            actor.id,
            ActivityType.PROJECT_UPDATED,
            ProjectUpdatedMetadata(action="created"),
        )
        return self.to_response(project)

    def update_project(self, actor: User, project_id: int, request: ProjectUpdate) -> ProjectResponse:
        """Update project metadata."""
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.PROJECT_UPDATE, "Not authorized to update this project"
        )

        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        required = sorted(k for k in ("title", "description", "status") if k in changes and changes[k] is None)
        if required:
            raise ValidationError("Field(s) cannot be cleared", details={"fields": required})
        self.store.update(project, changes)

        self.activities.record(
            project,
            actor.id,
            ActivityType.PROJECT_UPDATED,
            ProjectUpdatedMetadata(action="updated", changes=request.model_dump(mode="json", exclude_unset=True)),
        )
        return self.to_response(project)

    def delete_project(self, actor: User, project_id: int) -> str:
        """Delete a project and, explicitly, everything that belongs to it.

        Order: tasks, submissions (with their files), activities, project
        (with its files).
        Each step commits on its own; a failure part-way leaves the earlier
        deletions in place.
        """
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.PROJECT_DELETE, "Not authorized to delete this project"
        )
        title = project.title
        project_files = list(project.files or [])

        tasks_deleted = self.store.delete_many(Task, Task.project_id == project_id)

        submissions = self.store.find(Submission, Submission.project_id == project_id)
        for submission in submissions:
            self.storage.delete_all(submission.files or [])
        submissions_deleted = self.store.delete_many(Submission, Submission.project_id == project_id)

        activities_deleted = self.store.delete_many(Activity, Activity.project_id == project_id)
        self.store.delete_by_id(Project, project_id)
        self.storage.delete_all(project_files)

        logger.info(
            f"Project {project_id} deleted by user {actor.id}: {tasks_deleted} tasks, "
            f"{submissions_deleted} submissions, {activities_deleted} activities"
        )
        return title

    def add_member(self, actor: User, project_id: int, member_id: int) -> ProjectResponse:
        """Add a user to a project and the project to the user's groups.

        Two documents are written, project first. If the user write fails the
        project write is not undone.
        """
        project = self.get_project(project_id)
        access = AccessContext.resolve(actor, project=project)
        access.require(Capability.MEMBER_MANAGE, "Not authorized to add members")

        member = self.store.get(User, member_id, resource="User")
        if member.id in project.members:
            raise ValidationError("Member already in project", details={"member_id": member.id})

        self.store.update(project, {"members": [*project.members, member.id]})
        if project.id not in member.groups:
            self.store.update(member, {"groups": [*member.groups, project.id]})

        self.activities.record(
            project,
            actor.id,
            ActivityType.MEMBER_ADDED,
            MemberAddedMetadata(member_id=member.id, member_name=member.name),
        )
        return self.to_response(project)

    def remove_member(self, actor: User, project_id: int, member_id: int) -> ProjectResponse:
        """Remove a user from a project. No activity is recorded for removals."""
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.MEMBER_MANAGE, "Not authorized to remove members"
        )

        member = self.store.find_by_id(User, member_id)
        if member_id in project.members:
            self.store.update(project, {"members": [m for m in project.members if m != member_id]})
        if member is not None and project.id in member.groups:
            self.store.update(member, {"groups": [g for g in member.groups if g != project.id]})

        return self.to_response(project)

    def update_progress(self, actor: User, project_id: int, override: int | None = None) -> ProjectResponse:
        """Explicit recompute; the override only applies while the project has no tasks."""
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.PROJECT_VIEW, "Not authorized to access this project"
        )
        return self.to_response(self.recompute_progress(project_id, override=override))

    def recompute_progress(self, project_id: int, override: int | None = None) -> Project:
        """Re-derive progress from the full task set and store it.

        The write is guarded by the project version; when another request
        changed the project in between, the read and computation are redone.
        """
        attempts = settings.PROGRESS_RECOMPUTE_ATTEMPTS
        for attempt in range(1, attempts + 1):
            project = self.get_project(project_id)
            tasks = self.store.find(Task, Task.project_id == project_id)
            progress = task_ratio_progress(tasks, override)
            try:
                return self.store.update(project, {"progress": progress})
            except ConflictError:
                logger.warning(
                    f"Progress recompute for project {project_id} lost a version race "
                    f"(attempt {attempt}/{attempts})"
                )
        raise ConflictError("Project", str(project_id))

    def attach_files(
        self,
        actor: User,
        project_id: int,
        uploads: list[UploadFile],
    ) -> tuple[list[ProjectFile], ProjectResponse]:
        """Store uploads and attach them to a project.

        Stored files are removed again when the project write fails.
        """
        if not uploads:
            raise ValidationError("No files uploaded")
        project = self.get_project(project_id)
        AccessContext.resolve(actor, project=project).require(
            Capability.PROJECT_UPLOAD, "Not authorized to upload files to this project"
        )
        files = self.storage.save_all(uploads, area=f"projects/{project.id}")

        uploaded_at = datetime.now(timezone.utc)
        attached = [
            ProjectFile(**stored.model_dump(), uploaded_by=actor.id, uploaded_at=uploaded_at)
            for stored in files
        ]
        try:
            self.store.update(
                project,
                {"files": [*project.files, *(f.model_dump(mode="json") for f in attached)]},
            )
        except AppException:
            self.storage.delete_all(files)
            raise

        self.activities.record(
            project,
            actor.id,
            ActivityType.FILE_UPLOADED,
            FileUploadedMetadata(file_count=len(attached)),
        )
        return attached, self.to_response(project)

    # ==================== Expansion ====================

    def to_response(self, project: Project) -> ProjectResponse:
        return self.to_responses([project])[0]

    def to_responses(self, projects: list[Project]) -> list[ProjectResponse]:
        """Expand faculty and members for a batch of projects."""
        user_ids: set[int] = set()
        for project in projects:
            user_ids.add(project.faculty_id)
            user_ids.update(project.members)
        users = self.store.expand_users(user_ids)

        responses = []
        for project in projects:
            faculty = users.get(project.faculty_id)
            responses.append(ProjectResponse(
                id=project.id,
                title=project.title,
                description=project.description,
                faculty=UserBrief.model_validate(faculty) if faculty else None,
                members=[UserBrief.model_validate(users[m]) for m in project.members if m in users],
                status=project.status,
                progress=project.progress,
                deadline=project.deadline,
                files=[ProjectFile.model_validate(f) for f in project.files],
                version=project.version,
                created_at=project.created_at,
                updated_at=project.updated_at,
            ))
        return responses

