"""Access resolution: who may read, write and manage a document."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from docshare.exceptions import ForbiddenError, NotFoundError, UnauthenticatedError
from docshare.models.document import Document
from docshare.models.enums import PermissionLevel, Visibility
from docshare.models.user import User
from docshare.storage.repositories import (
    DocumentRepository,
    PermissionRepository,
    UserRepository,
)


class Role(str, Enum):
    """Requester's relationship to a document."""

    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"
    NONE = "NONE"

    @property
    def can_read(self) -> bool:
        return self is not Role.NONE


_ROLE_BY_LEVEL = {
    PermissionLevel.EDIT: Role.EDITOR,
    PermissionLevel.VIEW: Role.VIEWER,
}


def role_for_level(level: Optional[PermissionLevel]) -> Role:
    """Map a stored permission level (or its absence) to a role."""
    if level is None:
        return Role.NONE
    return _ROLE_BY_LEVEL[level]


@dataclass(frozen=True)
class DocumentAccess:
    """A resolved role together with the document it applies to."""

    role: Role
    document: Optional[Document] = None


class AccessResolver:
    """Authorization gate used by every read and write operation."""

    def __init__(self, session: Session):
        """
        Initialize access resolver with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.document_repo = DocumentRepository(session)
        self.permission_repo = PermissionRepository(session)

    def authenticate(self, requester_id: Optional[str]) -> User:
        """
        Resolve a verified identity to a registered user.

        Raises:
            UnauthenticatedError: If no identity was supplied or it is unknown
        """
        if not requester_id:
            raise UnauthenticatedError()
        user = self.user_repo.get_by_id(requester_id)
        if user is None:
            raise UnauthenticatedError("Unknown identity")
        return user

    def resolve(self, document_id: str, requester_id: str) -> DocumentAccess:
        """
        Decide the requester's role on a document.

        A missing document resolves to NONE, the same as an inaccessible one.
        """
        document = self.document_repo.get_by_id(document_id)
        if document is None:
            return DocumentAccess(Role.NONE)

        if document.author_id == requester_id:
            return DocumentAccess(Role.OWNER, document)

        permission = self.permission_repo.get(document_id, requester_id)
        return DocumentAccess(role_for_level(permission.level if permission else None), document)

    def require_read(self, document_id: str, requester_id: Optional[str]) -> DocumentAccess:
        """
        Resolve access for a read path.

        Raises:
            UnauthenticatedError: If the requester is not identified
            NotFoundError: If the document is missing or inaccessible
        """
        user = self.authenticate(requester_id)
        access = self.resolve(document_id, user.id)
        if not access.role.can_read:
            raise NotFoundError("Document", document_id)
        return access

    def require_owner(
        self, document_id: str, requester_id: Optional[str], action: str = "manage this document"
    ) -> Document:
        """
        Resolve access for a write or management path.

        Raises:
            UnauthenticatedError: If the requester is not identified
            ForbiddenError: If the requester is not the owner, including when
                            the document does not exist
        """
        user = self.authenticate(requester_id)
        access = self.resolve(document_id, user.id)
        if access.role is not Role.OWNER:
            raise ForbiddenError(f"Only document owners can {action}")
        return access.document

    def require_public(self, document_id: str) -> Document:
        """
        Resolve the unauthenticated direct-view path.

        Raises:
            NotFoundError: If the document is missing or not PUBLIC
        """
        document = self.document_repo.get_by_id(document_id)
        if document is None or document.visibility is not Visibility.PUBLIC:
            raise NotFoundError("Document", document_id)
        return document
