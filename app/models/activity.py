"""Activity feed model."""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import IDMixin, JsonType, utcnow


class ActivityType(str, enum.Enum):
    """Activity types."""

    TASK_CREATED = "task-created"
    TASK_UPDATED = "task-updated"
    TASK_COMPLETED = "task-completed"
    MEMBER_ADDED = "member-added"
    FILE_UPLOADED = "file-uploaded"
    SUBMISSION_CREATED = "submission-created"
    FEEDBACK_ADDED = "feedback-added"
    PROJECT_UPDATED = "project-updated"


class Activity(Base, IDMixin):
    """Append-only activity record, removed only with its project."""

    __tablename__ = "activities"

    project_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("projects.id"),
        nullable=False,
        index=True,
    )

    # Actor
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    type: Mapped[ActivityType] = mapped_column(
        Enum(ActivityType),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Tagged payload, see app.schemas.activity.ActivityMetadata
    extra_data: Mapped[dict | None] = mapped_column("metadata", JsonType, nullable=True)

    # Timestamp (append-only, no updated_at)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, type={self.type})>"


from app.models.user import User
