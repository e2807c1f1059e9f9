"""Permission service: owner-managed sharing of documents."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Session

from docshare.exceptions import DatabaseError, DocShareError, NotFoundError, ValidationError
from docshare.models.permission import DocumentPermission
from docshare.services.access_service import AccessResolver
from docshare.services.document.validation import DocumentValidator
from docshare.services.permission.validation import PermissionValidator
from docshare.storage.repositories import PermissionRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrantResult:
    """Permission row after a grant, and whether the grant created it."""

    permission: DocumentPermission
    created: bool


class PermissionService:
    """Service layer for listing, granting and revoking document permissions."""

    def __init__(self, session: Session):
        """
        Initialize permission service with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session
        self.permission_repo = PermissionRepository(session)
        self.user_repo = UserRepository(session)
        self.access = AccessResolver(session)
        self.validator = PermissionValidator()

    def list_permissions(
        self, document_id: str, requester_id: Optional[str]
    ) -> list[DocumentPermission]:
        """
        List all permission rows on a document, each with its user loaded.

        Any user who can read the document may list its permissions.

        Raises:
            UnauthenticatedError: If the requester is not identified
            NotFoundError: If the document is missing or inaccessible
            DatabaseError: If database operation fails
        """
        DocumentValidator.validate_id(document_id)
        try:
            self.access.require_read(document_id, requester_id)
            return self.permission_repo.get_by_document_id(document_id)
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to list permissions: {str(e)}", e) from e

    def grant_permission(
        self,
        document_id: str,
        requester_id: Optional[str],
        email: Any,
        level: Any,
    ) -> GrantResult:
        """
        Grant a user VIEW or EDIT access, updating the level if a row exists.

        Args:
            document_id: Document ID
            requester_id: Verified user ID; must be the owner
            email: Target user's email (matched case-insensitively)
            level: "VIEW" or "EDIT"

        Returns:
            The stored row and whether it was newly created

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If email or level is missing or invalid, or the
                             target is the owner
            ForbiddenError: If the requester is not the owner
            NotFoundError: If no user has the email
            DatabaseError: If database operation fails
        """
        DocumentValidator.validate_id(document_id)
        email = self.validator.validate_email(email)
        level = self.validator.validate_level(level)

        try:
            document = self.access.require_owner(document_id, requester_id, "manage permissions")

            target = self.user_repo.get_by_email(email)
            if target is None:
                raise NotFoundError("User", email)
            if target.id == document.author_id:
                raise ValidationError("Document owners already have full access", "email")

            created = self.permission_repo.get(document_id, target.id) is None
            permission = self.permission_repo.upsert(document_id, target.id, level, overwrite=True)
            self.session.commit()

            logger.info(
                "Granted %s on document %s to user %s", level.value, document_id, target.id
            )
            return GrantResult(permission=permission, created=created)

        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to grant permission: {str(e)}", e) from e

    def revoke_permission(
        self, document_id: str, requester_id: Optional[str], user_id: Any
    ) -> None:
        """
        Remove a user's permission row.

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If user_id is missing
            ForbiddenError: If the requester is not the owner
            NotFoundError: If no row exists for the user
            DatabaseError: If database operation fails
        """
        DocumentValidator.validate_id(document_id)
        self.validator.validate_user_id(user_id)

        try:
            self.access.require_owner(document_id, requester_id, "manage permissions")

            if not self.permission_repo.delete(document_id, user_id):
                raise NotFoundError("Permission", f"{document_id}/{user_id}")
            self.session.commit()

            logger.info("Revoked access to document %s for user %s", document_id, user_id)

        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to revoke permission: {str(e)}", e) from e
