"""Document model for storing rich-text documents."""

from typing import Any

from sqlalchemy import JSON, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docshare.models.base import Base, TimestampMixin, new_id
from docshare.models.enums import Visibility


def empty_content() -> dict[str, Any]:
    return {"type": "doc", "content": []}


class Document(Base, TimestampMixin):
    """Document model. The owner is the author and never has a permission row."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=empty_content)
    visibility: Mapped[Visibility] = mapped_column(
        Enum(Visibility, name="document_visibility", native_enum=False, length=16),
        nullable=False,
        default=Visibility.PRIVATE,
    )
    author_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    author: Mapped["User"] = relationship("User", lazy="joined")
    permissions: Mapped[list["DocumentPermission"]] = relationship(
        "DocumentPermission", back_populates="document", cascade="all, delete-orphan"
    )
    versions: Mapped[list["DocumentVersion"]] = relationship(
        "DocumentVersion", back_populates="document", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id!r}, title={self.title!r})>"
