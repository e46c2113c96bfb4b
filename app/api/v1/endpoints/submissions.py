"""Submission endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import CurrentUser, FileStorageDep
from app.schemas.common import MessageResponse
from app.schemas.submission import (
    SubmissionEnvelope,
    SubmissionListEnvelope,
    SubmissionReview,
)
from app.services.submission import SubmissionService

router = APIRouter()


@router.get("", response_model=SubmissionListEnvelope)
def list_submissions(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
    project_id: int | None = Query(None, description="Filter by project"),
):
    """
    List submissions, newest first.

    - Students: their own submissions
    - Faculty: submissions to projects they own
    - Admins: all submissions
    """
    service = SubmissionService(db, storage)
    submissions = service.list_submissions(current_user, project_id=project_id)
    return SubmissionListEnvelope(count=len(submissions), submissions=submissions)


@router.get("/{submission_id}", response_model=SubmissionEnvelope)
def get_submission(
    submission_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Get a submission by ID.
    """
    service = SubmissionService(db, storage)
    return SubmissionEnvelope(submission=service.get_submission(current_user, submission_id))


@router.post("", response_model=SubmissionEnvelope, status_code=status.HTTP_201_CREATED)
def create_submission(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
    project_id: int = Form(...),
    comments: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
):
    """
    Submit work for a project (multipart form).

    Project members only.
    """
    service = SubmissionService(db, storage)
    submission = service.create_submission(current_user, project_id, files or [], comments=comments)
    return SubmissionEnvelope(submission=submission)


@router.put("/{submission_id}", response_model=SubmissionEnvelope)
def review_submission(
    submission_id: int,
    request: SubmissionReview,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Review a submission: status, grade and feedback.

    Owning faculty or admins, never the submitter.
    """
    service = SubmissionService(db, storage)
    return SubmissionEnvelope(submission=service.review_submission(current_user, submission_id, request))


@router.delete("/{submission_id}", response_model=MessageResponse)
def delete_submission(
    submission_id: int,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    storage: FileStorageDep,
):
    """
    Delete a submission and its stored files.
    """
    service = SubmissionService(db, storage)
    service.delete_submission(current_user, submission_id)
    return MessageResponse(message="Submission deleted")
