"""Per-user document permission model."""

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docshare.models.base import Base, TimestampMixin, new_id
from docshare.models.enums import PermissionLevel


class DocumentPermission(Base, TimestampMixin):
    """Grants one user VIEW or EDIT access to one document."""

    __tablename__ = "document_permissions"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_permissions_document_user"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=new_id)
    document_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    level: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, name="permission_level", native_enum=False, length=16),
        nullable=False,
        default=PermissionLevel.VIEW,
    )

    # Relationships
    document: Mapped["Document"] = relationship("Document", back_populates="permissions")
    user: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<DocumentPermission(document_id={self.document_id!r}, "
            f"user_id={self.user_id!r}, level={self.level!r})>"
        )
