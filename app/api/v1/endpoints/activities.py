"""Project activity feed endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser
from app.core.exceptions import ValidationError
from app.core.document_store import DocumentStore
from app.schemas.activity import ActivityListEnvelope
from app.services.activity import ActivityService

router = APIRouter()


@router.get("", response_model=ActivityListEnvelope)
def list_activities(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    project_id: int | None = Query(None, description="Project to show activity for"),
):
    """
    Latest activity for a project, newest first.
    """
    if project_id is None:
        raise ValidationError("Project ID is required")
    service = ActivityService(DocumentStore(db))
    activities = service.list_for_project(current_user, project_id)
    return ActivityListEnvelope(count=len(activities), activities=activities)


@router.get("/project/{project_id}", response_model=ActivityListEnvelope)
def list_project_activities(
    project_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Latest activity for a project, newest first.
    """
    service = ActivityService(DocumentStore(db))
    activities = service.list_for_project(current_user, project_id)
    return ActivityListEnvelope(count=len(activities), activities=activities)
