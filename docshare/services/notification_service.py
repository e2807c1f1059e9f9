"""Notification inbox for mentioned users."""

from typing import Optional

from sqlalchemy.orm import Session

from docshare.exceptions import DatabaseError, DocShareError, NotFoundError
from docshare.models.notification import Notification
from docshare.services.access_service import AccessResolver
from docshare.storage.repositories import NotificationRepository


class NotificationService:
    """Lists and acknowledges a user's notifications."""

    def __init__(self, session: Session):
        self.session = session
        self.notification_repo = NotificationRepository(session)
        self.access = AccessResolver(session)

    def list_notifications(
        self, requester_id: Optional[str], unread_only: bool = False
    ) -> list[Notification]:
        """List the requester's notifications, newest first."""
        try:
            user = self.access.authenticate(requester_id)
            return self.notification_repo.list_for_user(user.id, unread_only=unread_only)
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to list notifications: {str(e)}", e) from e

    def mark_read(self, requester_id: Optional[str], notification_id: str) -> Notification:
        """
        Mark one of the requester's notifications as read.

        Raises:
            UnauthenticatedError: If the requester is not identified
            NotFoundError: If the notification does not exist or belongs to someone else
            DatabaseError: If database operation fails
        """
        try:
            user = self.access.authenticate(requester_id)
            notification = self.notification_repo.get_by_id(notification_id)
            if notification is None or notification.user_id != user.id:
                raise NotFoundError("Notification", notification_id)

            notification.read = True
            self.session.commit()
            return notification
        except DocShareError:
            self.session.rollback()
            raise
        except Exception as e:
            self.session.rollback()
            raise DatabaseError(f"Failed to update notification: {str(e)}", e) from e
