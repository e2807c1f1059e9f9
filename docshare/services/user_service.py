"""User directory: registration, lookup and mention suggestions."""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from docshare.exceptions import DatabaseError, DocShareError, DuplicateError, NotFoundError, ValidationError
from docshare.models.user import User
from docshare.services.access_service import AccessResolver
from docshare.services.permission.validation import PermissionValidator
from docshare.storage.repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for users known to Doc-Share."""

    NAME_MAX_LENGTH = 255
    SUGGESTION_LIMIT = 10

    def __init__(self, session: Session):
        """
        Initialize user service with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.access = AccessResolver(session)

    def register_user(self, email: Any, name: Optional[str] = None, user_id: Optional[str] = None) -> User:
        """
        Register a user verified by the identity provider.

        Args:
            email: Email address, stored as given
            name: Optional display name
            user_id: Optional ID issued by the identity provider

        Raises:
            ValidationError: If email or name is invalid
            DuplicateError: If the email (case-insensitively) or ID is taken
            DatabaseError: If database operation fails
        """
        email = PermissionValidator.validate_email(email)
        if name is not None:
            if not isinstance(name, str):
                raise ValidationError("Name must be a string", "name")
            if len(name) > self.NAME_MAX_LENGTH:
                raise ValidationError(
                    f"Name must be at most {self.NAME_MAX_LENGTH} characters", "name"
                )
            name = name.strip() or None

        try:
            if self.user_repo.get_by_email(email) is not None:
                raise DuplicateError("User", "email", email)
            if user_id is not None and self.user_repo.get_by_id(user_id) is not None:
                raise DuplicateError("User", "id", user_id)

            user = User(email=email, name=name)
            if user_id is not None:
                user.id = user_id
            self.user_repo.create(user)
            self.session.commit()
            logger.info("Registered user %s", user.id)
            return user

        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to register user: {str(e)}", e) from e

    def get_user(self, user_id: str) -> User:
        """
        Get a user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        try:
            user = self.user_repo.get_by_id(user_id)
        except Exception as e:
            raise DatabaseError(f"Failed to get user: {str(e)}", e) from e
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> User:
        """
        Get a user by email, matching case-insensitively.

        Raises:
            NotFoundError: If no user has the email
        """
        try:
            user = self.user_repo.get_by_email(email)
        except Exception as e:
            raise DatabaseError(f"Failed to find user: {str(e)}", e) from e
        if user is None:
            raise NotFoundError("User", email)
        return user

    def search_users(self, requester_id: Optional[str], query: Optional[str]) -> list[User]:
        """
        Suggest users to mention: name or email contains ``query``.

        The requester is excluded. An empty query returns no suggestions.

        Raises:
            UnauthenticatedError: If the requester is not identified
        """
        try:
            requester = self.access.authenticate(requester_id)
            if not query:
                return []
            return self.user_repo.search(
                query, exclude_user_id=requester.id, limit=self.SUGGESTION_LIMIT
            )
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to search users: {str(e)}", e) from e
