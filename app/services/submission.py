"""Submission service."""

import logging
from datetime import datetime, timezone

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.document_store import DocumentStore
from app.core.exceptions import AppException, ValidationError
from app.core.permissions import AccessContext, Capability
from app.models.activity import ActivityType
from app.models.project import Project
from app.models.submission import Submission
from app.models.user import User, UserRole
from app.schemas.activity import FeedbackAddedMetadata, SubmissionCreatedMetadata
from app.schemas.auth import UserBrief
from app.schemas.file import StoredFile
from app.schemas.project import ProjectRef
from app.schemas.submission import SubmissionResponse, SubmissionReview
from app.services.activity import ActivityService
from app.services.storage import FileStorage

logger = logging.getLogger(__name__)

SUBMISSION_EXPAND = ("project", "submitted_by", "reviewed_by")


class SubmissionService:
    """Creates, reviews and removes project submissions."""

    def __init__(self, db: Session, storage: FileStorage | None = None):
        self.store = DocumentStore(db)
        self.activities = ActivityService(self.store)
        self.storage = storage or FileStorage()

    # ==================== Queries ====================

    def list_submissions(self, actor: User, project_id: int | None = None) -> list[SubmissionResponse]:
        """Students see their own submissions, faculty those of their projects, admins all."""
        criteria = []
        if project_id is not None:
            criteria.append(Submission.project_id == project_id)

        if actor.role == UserRole.STUDENT:
            criteria.append(Submission.submitted_by_id == actor.id)
        elif actor.role == UserRole.FACULTY:
            owned = [p.id for p in self.store.find(Project, Project.faculty_id == actor.id)]
            criteria.append(Submission.project_id.in_(owned))

        submissions = self.store.find(
            Submission,
            *criteria,
            expand=SUBMISSION_EXPAND,
            order_by=(Submission.submitted_at.desc(), Submission.id.desc()),
        )
        return [self.to_response(s) for s in submissions]

    def get_submission(self, actor: User, submission_id: int) -> SubmissionResponse:
        submission = self._load(submission_id)
        AccessContext.resolve(actor, project=submission.project, submission=submission).require(
            Capability.SUBMISSION_VIEW, "Not authorized to access this submission"
        )
        return self.to_response(submission)

    # ==================== Mutations ====================

    def create_submission(
        self,
        actor: User,
        project_id: int,
        uploads: list[UploadFile],
        comments: str | None = None,
    ) -> SubmissionResponse:
        """Store the uploaded files and record a submission referencing them."""
        project = self.store.get(Project, project_id, resource="Project")
        AccessContext.resolve(actor, project=project).require(
            Capability.SUBMISSION_CREATE, "You are not a member of this project"
        )

        files = self.storage.save_all(uploads, area=f"submissions/{project.id}")
        submission = Submission(
            project_id=project.id,
            submitted_by_id=actor.id,
            files=[f.model_dump(mode="json") for f in files],
            comments=comments.strip() if comments else None,
        )
        try:
            self.store.insert(submission)
        except AppException:
            self.storage.delete_all(files)
            raise
        logger.info(f"Submission {submission.id} created for project {project.id} by user {actor.id}")

        self.activities.record(
            project,
            actor.id,
            ActivityType.SUBMISSION_CREATED,
            SubmissionCreatedMetadata(submission_id=submission.id),
        )
        return self.to_response(self._load(submission.id))

    def review_submission(
        self,
        actor: User,
        submission_id: int,
        request: SubmissionReview,
    ) -> SubmissionResponse:
        """Set status, grade and feedback. Never allowed to the submitter."""
        submission = self._load(submission_id)
        project = submission.project
        AccessContext.resolve(actor, project=project, submission=submission).require(
            Capability.SUBMISSION_REVIEW, "Not authorized to review this submission"
        )

        review = request.model_dump(exclude_unset=True)
        if not review:
            raise ValidationError("No review fields provided")
        if "status" in review and review["status"] is None:
            raise ValidationError("Field(s) cannot be cleared", details={"fields": ["status"]})
        if "feedback" in review and review["feedback"] is not None:
            review["feedback"] = review["feedback"].strip()

        self.store.update(
            submission,
            {
                **review,
                "reviewed_by_id": actor.id,
                "reviewed_at": datetime.now(timezone.utc),
            },
        )

        self.activities.record(
            project,
            actor.id,
            ActivityType.FEEDBACK_ADDED,
            FeedbackAddedMetadata(
                submission_id=submission.id,
                status=submission.status,
                grade=submission.grade,
            ),
        )
        return self.to_response(self._load(submission.id))

    def delete_submission(self, actor: User, submission_id: int) -> None:
        """Delete a submission; its stored files are removed best-effort first."""
        submission = self._load(submission_id)
        AccessContext.resolve(actor, project=submission.project, submission=submission).require(
            Capability.SUBMISSION_DELETE, "Not authorized to delete this submission"
        )

        files = list(submission.files or [])
        removed = self.storage.delete_all(files)
        self.store.delete_by_id(Submission, submission_id)
        logger.info(
            f"Submission {submission_id} deleted by user {actor.id} "
            f"({removed}/{len(files)} files removed)"
        )

    # ==================== Helpers ====================

    def _load(self, submission_id: int) -> Submission:
        return self.store.get(Submission, submission_id, expand=SUBMISSION_EXPAND, resource="Submission")

    @staticmethod
    def to_response(submission: Submission) -> SubmissionResponse:
        return SubmissionResponse(
            id=submission.id,
            project=ProjectRef.model_validate(submission.project),
            submitted_by=UserBrief.model_validate(submission.submitted_by),
            files=[StoredFile.model_validate(f) for f in submission.files or []],
            comments=submission.comments,
            status=submission.status,
            grade=submission.grade,
            feedback=submission.feedback,
            reviewed_by=UserBrief.model_validate(submission.reviewed_by) if submission.reviewed_by else None,
            reviewed_at=submission.reviewed_at,
            submitted_at=submission.submitted_at,
        )
