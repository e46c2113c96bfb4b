"""Document store over the SQLAlchemy session.

Each collection is one mapped model. Every write is committed on its own,
so a compound mutation is a sequence of single-document atomic writes and
an earlier write stays committed when a later one fails.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select, delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from app.core.database import Base
from app.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from app.models.user import User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class DocumentStore:
    """Key-document access to the users, projects, tasks, submissions and activities collections."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== Reads ====================

    def find(
        self,
        model: type[ModelT],
        *criteria: Any,
        expand: Iterable[str] = (),
        order_by: Sequence[Any] = (),
        limit: int | None = None,
        **filters: Any,
    ) -> list[ModelT]:
        """Return documents matching the criteria and equality filters."""
        query = select(model)
        if criteria:
            query = query.where(*criteria)
        if filters:
            query = query.filter_by(**filters)
        query = self._with_expand(query, model, expand)
        if order_by:
            query = query.order_by(*order_by)
        if limit:
            query = query.limit(limit)
        return list(self._execute(query).scalars().all())

    def find_by_id(
        self,
        model: type[ModelT],
        document_id: int,
        expand: Iterable[str] = (),
    ) -> ModelT | None:
        """Return a single document or None."""
        query = self._with_expand(select(model).where(model.id == document_id), model, expand)
        return self._execute(query).scalar_one_or_none()

    def get(
        self,
        model: type[ModelT],
        document_id: int,
        expand: Iterable[str] = (),
        resource: str | None = None,
    ) -> ModelT:
        """Return a single document or raise NotFoundError."""
        document = self.find_by_id(model, document_id, expand=expand)
        if document is None:
            raise NotFoundError(resource or model.__name__, str(document_id))
        return document

    def expand_users(self, user_ids: Iterable[int]) -> dict[int, User]:
        """Resolve a set of user references in one query."""
        ids = {uid for uid in user_ids if uid is not None}
        if not ids:
            return {}
        return {user.id: user for user in self.find(User, User.id.in_(ids))}

    # ==================== Writes ====================

    def insert(self, document: ModelT) -> ModelT:
        """Insert a new document and commit it."""
        self.db.add(document)
        self._commit(document)
        return document

    def update(
        self,
        document: ModelT,
        patch: dict[str, Any],
        validate: bool = True,
    ) -> ModelT:
        """Apply a patch to a loaded document and commit it.

        Versioned documents are written with a compare-and-swap on their
        version column; a lost race raises ConflictError.
        """
        if validate:
            self._validate_patch(type(document), patch)
        for field, value in patch.items():
            setattr(document, field, value)
        self._commit(document)
        return document

    def update_by_id(
        self,
        model: type[ModelT],
        document_id: int,
        patch: dict[str, Any],
        validate: bool = True,
    ) -> ModelT:
        """Load a document by id, patch it and commit it."""
        document = self.get(model, document_id)
        return self.update(document, patch, validate=validate)

    def delete_by_id(self, model: type[ModelT], document_id: int) -> None:
        """Delete a single document."""
        self._execute(delete(model).where(model.id == document_id))
        self._commit()

    def delete_many(self, model: type[ModelT], *criteria: Any) -> int:
        """Delete every document matching the criteria, returning the count."""
        result = self._execute(delete(model).where(*criteria))
        self._commit()
        return result.rowcount or 0

    # ==================== Internals ====================

    @staticmethod
    def _with_expand(query: Select, model: type[Base], expand: Iterable[str]) -> Select:
        for field in expand:
            query = query.options(selectinload(getattr(model, field)))
        # Every read reflects the latest committed state, not the identity map
        return query.execution_options(populate_existing=True)

    @staticmethod
    def _validate_patch(model: type[Base], patch: dict[str, Any]) -> None:
        known = set(inspect(model).column_attrs.keys())
        unknown = sorted(set(patch) - known)
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for {model.__name__}",
                details={"fields": unknown},
            )
        immutable = sorted(set(patch) & getattr(model, "__immutable__", frozenset()))
        if immutable:
            raise ValidationError(
                f"Field(s) of {model.__name__} cannot be changed",
                details={"fields": immutable},
            )

    def _execute(self, statement: Any):
        try:
            return self.db.execute(statement)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Document store read failed")
            raise StorageError(details={"reason": e.__class__.__name__}) from e

    def _commit(self, document: Base | None = None) -> None:
        name = type(document).__name__ if document is not None else "Document"
        identifier = inspect(document).identity if document is not None else None
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            identifier = str(identifier[0]) if identifier else None
            logger.warning(f"Version conflict writing {name} {identifier}")
            raise ConflictError(name, identifier) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Document store write failed")
            raise StorageError(details={"reason": e.__class__.__name__}) from e
