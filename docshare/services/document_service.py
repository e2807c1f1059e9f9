"""Document service layer for business logic and validation."""

import copy
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.orm import Session

from docshare.config import Settings, get_settings
from docshare.exceptions import DatabaseError, DocShareError, ValidationError
from docshare.models.base import utcnow
from docshare.models.document import Document, empty_content
from docshare.models.enums import Scope, Visibility
from docshare.models.user import User
from docshare.services.access_service import (
    AccessResolver,
    DocumentAccess,
    Role,
    role_for_level,
)
from docshare.services.document.validation import DocumentValidator
from docshare.services.sharing.auto_share import MentionAutoShare
from docshare.services.version_service import VersionService
from docshare.storage.repositories import DocumentRepository, PermissionRepository

logger = logging.getLogger(__name__)

# Called with the committed document and the editing user
PostUpdateHook = Callable[[Document, User], Any]


@dataclass(frozen=True)
class DocumentListing:
    """A document as seen by one requester."""

    document: Document
    role: Role


def parse_scope(scope: Any) -> Scope:
    """Normalize a scope name, raising ValidationError when unknown."""
    try:
        return Scope(scope)
    except ValueError:
        raise ValidationError(
            f"Scope must be one of: {', '.join(s.value for s in Scope)}", "scope"
        ) from None


class DocumentService:
    """Service layer for document operations with access control and validation."""

    def __init__(
        self,
        session: Session,
        settings: Settings | None = None,
        post_update_hooks: Iterable[PostUpdateHook] | None = None,
    ):
        """
        Initialize document service with database session.

        Args:
            session: SQLAlchemy database session
            settings: Application settings (defaults to cached settings)
            post_update_hooks: Callables run after each committed update. Each
                               one is isolated: failures are logged, never
                               raised. Defaults to mention auto-sharing.
        """
        self.session = session
        self.settings = settings or get_settings()
        self.document_repo = DocumentRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.access = AccessResolver(session)
        self.versions = VersionService(session)
        self.validator = DocumentValidator()

        if post_update_hooks is None:
            post_update_hooks = [
                MentionAutoShare(session, policy=self.settings.mention_grant_policy)
            ]
        self.post_update_hooks = list(post_update_hooks)

    def create_document(
        self,
        requester_id: Optional[str],
        title: str,
        content: dict[str, Any] | None = None,
        visibility: Any = Visibility.PRIVATE,
    ) -> Document:
        """
        Create a new document owned by the requester.

        Args:
            requester_id: Verified user ID of the author
            title: Document title (required, non-empty)
            content: Optional rich-text tree; defaults to an empty document
            visibility: PUBLIC or PRIVATE (default PRIVATE)

        Returns:
            Created document

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If title, content or visibility is invalid
            DatabaseError: If database operation fails
        """
        self.validator.validate_title(title)
        visibility = self.validator.validate_visibility(visibility)
        if content is None:
            content = empty_content()
        else:
            self.validator.validate_content(content)

        try:
            author = self.access.authenticate(requester_id)
            document = Document(
                title=title,
                content=copy.deepcopy(content),
                visibility=visibility,
                author_id=author.id,
            )
            self.document_repo.create(document)
            self.session.commit()
            return document

        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to create document: {str(e)}", e) from e

    def get_document(self, document_id: str, requester_id: Optional[str]) -> DocumentAccess:
        """
        Get a document together with the requester's role.

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If document_id is invalid
            NotFoundError: If the document is missing or inaccessible
            DatabaseError: If database operation fails
        """
        self.validator.validate_id(document_id)
        try:
            return self.access.require_read(document_id, requester_id)
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to get document: {str(e)}", e) from e

    def get_public_document(self, document_id: str) -> Document:
        """
        Get a PUBLIC document without an identity.

        Raises:
            ValidationError: If document_id is invalid
            NotFoundError: If the document is missing or PRIVATE
            DatabaseError: If database operation fails
        """
        self.validator.validate_id(document_id)
        try:
            return self.access.require_public(document_id)
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to get document: {str(e)}", e) from e

    def update_document(
        self,
        document_id: str,
        requester_id: Optional[str],
        title: Any,
        content: Any,
        visibility: Any,
    ) -> Document:
        """
        Replace a document's title, content and visibility.

        The update and its version snapshot commit together. Post-update
        hooks (mention auto-sharing) run afterwards and cannot fail the save.
        Concurrent saves both succeed; the last one to commit wins.

        Args:
            document_id: Document ID
            requester_id: Verified user ID; must be the owner
            title: New title (required)
            content: New rich-text tree (required)
            visibility: PUBLIC or PRIVATE (required)

        Returns:
            Updated document

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If any field is missing or invalid
            ForbiddenError: If the requester is not the owner
            DatabaseError: If database operation fails
        """
        self.validator.validate_id(document_id)
        self.validator.validate_title(title)
        self.validator.validate_content(content)
        visibility = self.validator.validate_visibility(visibility)

        try:
            editor = self.access.authenticate(requester_id)
            document = self.access.require_owner(document_id, editor.id, "edit documents")

            document.title = title
            document.content = copy.deepcopy(content)
            document.visibility = visibility
            document.updated_at = utcnow()
            self.document_repo.update(document)
            self.versions.record_snapshot(document, editor.id)
            self.session.commit()

        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to update document: {str(e)}", e) from e

        self._run_post_update_hooks(document, editor)
        return document

    def list_documents(self, requester_id: Optional[str], scope: Any = Scope.ALL) -> list[DocumentListing]:
        """
        List the requester's documents for a dashboard scope, newest first.

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If scope is unknown
            DatabaseError: If database operation fails
        """
        scope = parse_scope(scope)

        try:
            user = self.access.authenticate(requester_id)
            updated_since = utcnow() - timedelta(days=self.settings.recent_window_days)
            documents = self.document_repo.list_for_scope(user.id, scope.value, updated_since)
            levels = self.permission_repo.levels_for_user(
                user.id, [d.id for d in documents if d.author_id != user.id]
            )
            return [
                DocumentListing(document=d, role=_role_for(d, user.id, levels))
                for d in documents
            ]
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to list documents: {str(e)}", e) from e

    def _run_post_update_hooks(self, document: Document, editor: User) -> None:
        document_id = document.id
        for hook in self.post_update_hooks:
            try:
                hook(document, editor)
            except Exception:
                self.session.rollback()
                logger.exception(
                    "Post-update hook %r failed for document %s", hook, document_id
                )


def _role_for(document: Document, user_id: str, levels: dict) -> Role:
    if document.author_id == user_id:
        return Role.OWNER
    return role_for_level(levels.get(document.id))
