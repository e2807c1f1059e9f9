"""Append-only document version snapshots."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docshare.models.base import Base, new_id, utcnow


class DocumentVersion(Base):
    """Full copy of a document's content taken on each content update."""

    __tablename__ = "document_versions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )

    # Relationships
    document: Mapped["Document"] = relationship("Document", back_populates="versions")
    author: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<DocumentVersion(id={self.id!r}, document_id={self.document_id!r})>"
