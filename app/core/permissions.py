"""Capability resolution and the authorization gate.

Capabilities are resolved once per request from the actor's relation to the
project (and, where relevant, to the task or submission being acted on).
Handlers never compare role strings themselves; they ask the resolved
context for a capability.
"""

import enum

from app.core.exceptions import PermissionDeniedError
from app.models.project import Project
from app.models.submission import Submission
from app.models.task import Task
from app.models.user import User, UserRole


class Capability(str, enum.Enum):
    """Permission keys checked by the authorization gate."""

    PROJECT_VIEW = "project:view"
    PROJECT_CREATE = "project:create"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"
    PROJECT_UPLOAD = "project:upload"
    MEMBER_MANAGE = "member:manage"
    TASK_VIEW = "task:view"
    TASK_CREATE = "task:create"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"
    SUBMISSION_VIEW = "submission:view"
    SUBMISSION_CREATE = "submission:create"
    SUBMISSION_REVIEW = "submission:review"
    SUBMISSION_DELETE = "submission:delete"
    ACTIVITY_VIEW = "activity:view"


# Everything that only makes sense with a project in scope
PROJECT_SCOPED = frozenset(c for c in Capability if c is not Capability.PROJECT_CREATE)

FACULTY_OWNER = frozenset({
    Capability.PROJECT_VIEW,
    Capability.PROJECT_UPDATE,
    Capability.PROJECT_DELETE,
    Capability.PROJECT_UPLOAD,
    Capability.MEMBER_MANAGE,
    Capability.TASK_VIEW,
    Capability.TASK_CREATE,
    Capability.TASK_UPDATE,
    Capability.TASK_DELETE,
    Capability.SUBMISSION_VIEW,
    Capability.SUBMISSION_REVIEW,
    Capability.SUBMISSION_DELETE,
    Capability.ACTIVITY_VIEW,
})

MEMBER = frozenset({
    Capability.PROJECT_VIEW,
    Capability.PROJECT_UPLOAD,
    Capability.TASK_VIEW,
    Capability.TASK_CREATE,
    Capability.TASK_UPDATE,
    Capability.SUBMISSION_VIEW,
    Capability.SUBMISSION_CREATE,
    Capability.ACTIVITY_VIEW,
})


def resolve_capabilities(
    actor: User,
    project: Project | None = None,
    task: Task | None = None,
    submission: Submission | None = None,
) -> frozenset[Capability]:
    """Compute the actor's capability set for the resources in scope."""
    capabilities: set[Capability] = set()

    if actor.role in (UserRole.FACULTY, UserRole.ADMIN):
        capabilities.add(Capability.PROJECT_CREATE)

    if project is None:
        return frozenset(capabilities)

    if actor.role == UserRole.ADMIN:
        capabilities |= PROJECT_SCOPED
    if project.faculty_id == actor.id:
        capabilities |= FACULTY_OWNER
    if actor.id in (project.members or []):
        capabilities |= MEMBER

    if task is not None and task.assigned_to_id == actor.id:
        capabilities |= {Capability.TASK_VIEW, Capability.TASK_UPDATE}

    if submission is not None and submission.submitted_by_id == actor.id:
        capabilities |= {Capability.SUBMISSION_VIEW, Capability.SUBMISSION_DELETE}
        # A submitter never reviews their own submission, whatever their role
        capabilities.discard(Capability.SUBMISSION_REVIEW)

    return frozenset(capabilities)


class AccessContext:
    """Actor plus the capabilities resolved for one request."""

    def __init__(self, actor: User, capabilities: frozenset[Capability]):
        self.actor = actor
        self.capabilities = capabilities

    @classmethod
    def resolve(
        cls,
        actor: User,
        project: Project | None = None,
        task: Task | None = None,
        submission: Submission | None = None,
    ) -> "AccessContext":
        return cls(actor, resolve_capabilities(actor, project, task, submission))

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability, message: str = "Permission denied") -> None:
        """Raise PermissionDeniedError unless the capability was granted."""
        authorize(self.capabilities, capability, message)


def authorize(
    capabilities: frozenset[Capability],
    capability: Capability,
    message: str = "Permission denied",
) -> None:
    """The authorization gate: allow or raise PermissionDeniedError."""
    if capability not in capabilities:
        raise PermissionDeniedError(message, required_permission=capability.value)
