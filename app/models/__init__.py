"""Database models package."""

from app.models.activity import Activity, ActivityType
from app.models.project import Project, ProjectStatus
from app.models.submission import Submission, SubmissionStatus
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.user import User, UserRole

__all__ = [
    # User
    "User",
    "UserRole",
    # Project
    "Project",
    "ProjectStatus",
    # Task
    "Task",
    "TaskPriority",
    "TaskStatus",
    # Submission
    "Submission",
    "SubmissionStatus",
    # Activity
    "Activity",
    "ActivityType",
]
