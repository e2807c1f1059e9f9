"""Version trail: append-only snapshots of document content."""

import copy
from typing import Optional

from sqlalchemy.orm import Session

from docshare.exceptions import DatabaseError, DocShareError
from docshare.models.document import Document
from docshare.models.version import DocumentVersion
from docshare.services.access_service import AccessResolver
from docshare.services.document.validation import DocumentValidator
from docshare.storage.repositories import VersionRepository


class VersionService:
    """Records and lists document snapshots."""

    def __init__(self, session: Session):
        """
        Initialize version service with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session
        self.version_repo = VersionRepository(session)
        self.access = AccessResolver(session)

    def record_snapshot(self, document: Document, author_id: str) -> DocumentVersion:
        """
        Append a snapshot of the document's current content.

        Joins the caller's transaction; the caller commits.
        """
        version = DocumentVersion(
            document_id=document.id,
            content=copy.deepcopy(document.content),
            author_id=author_id,
        )
        return self.version_repo.append(version)

    def list_versions(self, document_id: str, requester_id: Optional[str]) -> list[DocumentVersion]:
        """
        List a document's snapshots, newest first.

        Raises:
            UnauthenticatedError: If the requester is not identified
            NotFoundError: If the document is missing or inaccessible
            DatabaseError: If database operation fails
        """
        DocumentValidator.validate_id(document_id)
        try:
            self.access.require_read(document_id, requester_id)
            return self.version_repo.get_by_document_id(document_id)
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to list versions: {str(e)}", e) from e
