"""Activity recording service - append-only."""

import logging

from app.core.config import settings
from app.core.document_store import DocumentStore
from app.core.exceptions import ValidationError
from app.core.permissions import AccessContext, Capability
from app.models.activity import Activity, ActivityType
from app.models.project import Project
from app.models.user import User
from app.schemas.activity import (
    ActivityMetadata,
    ActivityResponse,
    activity_metadata_adapter,
)
from app.schemas.auth import UserBrief

logger = logging.getLogger(__name__)


# One description template per activity type
DESCRIPTION_TEMPLATES: dict[ActivityType, str] = {
    ActivityType.TASK_CREATED: 'Task "{task_title}" was created',
    ActivityType.TASK_UPDATED: 'Task "{task_title}" was updated ({status})',
    ActivityType.TASK_COMPLETED: 'Task "{task_title}" was completed',
    ActivityType.MEMBER_ADDED: "{member_name} was added to the project",
    ActivityType.FILE_UPLOADED: "{file_count} file(s) were uploaded to the project",
    ActivityType.SUBMISSION_CREATED: 'New submission was created for project "{project_title}"',
    ActivityType.FEEDBACK_ADDED: "Feedback was added to submission",
    ActivityType.PROJECT_UPDATED: 'Project "{project_title}" was {action}',
}


def describe(project: Project, metadata: ActivityMetadata) -> str:
    """Render the fixed description for an activity payload."""
    activity_type = ActivityType(metadata.type)
    context = metadata.model_dump(mode="json")
    context["project_title"] = project.title
    return DESCRIPTION_TEMPLATES[activity_type].format(**context)


class ActivityService:
    """Writes and lists project activity."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def record(
        self,
        project: Project,
        actor_id: int,
        activity_type: ActivityType,
        metadata: ActivityMetadata,
    ) -> Activity:
        """Append one activity.

        Storage failures propagate to the calling mutation.
        """
        if metadata.type != activity_type.value:
            raise ValidationError(
                "Activity metadata does not match activity type",
                details={"type": activity_type.value, "metadata_type": metadata.type},
            )
        activity = Activity(
            project_id=project.id,
            user_id=actor_id,
            type=activity_type,
            description=describe(project, metadata),
            extra_data=metadata.model_dump(mode="json"),
        )
        self.store.insert(activity)
        logger.info(f"Activity {activity_type.value} recorded for project {project.id} by user {actor_id}")
        return activity

    def list_for_project(self, actor: User, project_id: int) -> list[ActivityResponse]:
        """Latest activities for a project, newest first."""
        project = self.store.get(Project, project_id, resource="Project")
        access = AccessContext.resolve(actor, project=project)
        access.require(Capability.ACTIVITY_VIEW, "Not authorized to view activities for this project")

        activities = self.store.find(
            Activity,
            Activity.project_id == project_id,
            expand=("user",),
            order_by=(Activity.created_at.desc(), Activity.id.desc()),
            limit=settings.ACTIVITY_FEED_LIMIT,
        )
        return [self.to_response(activity) for activity in activities]

    @staticmethod
    def to_response(activity: Activity) -> ActivityResponse:
        return ActivityResponse(
            id=activity.id,
            project_id=activity.project_id,
            user=UserBrief.model_validate(activity.user) if activity.user else None,
            type=activity.type,
            description=activity.description,
            metadata=(
                activity_metadata_adapter.validate_python(activity.extra_data)
                if activity.extra_data
                else None
            ),
            created_at=activity.created_at,
        )
