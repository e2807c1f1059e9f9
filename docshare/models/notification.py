"""Mention notifications."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from docshare.models.base import Base, new_id, utcnow


class Notification(Base):
    """Notification for a user mentioned in a document.

    (user_id, document_id, message) is unique so re-saving the same mention
    set does not produce duplicates.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "document_id", "message", name="uq_notifications_user_document_message"
        ),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id!r}, user_id={self.user_id!r}, read={self.read!r})>"
