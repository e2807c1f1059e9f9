"""Repository pattern implementation for data access layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from docshare.models.base import new_id, utcnow
from docshare.models.document import Document
from docshare.models.enums import PermissionLevel
from docshare.models.notification import Notification
from docshare.models.permission import DocumentPermission
from docshare.models.user import User
from docshare.models.version import DocumentVersion


def _dialect_insert(session: Session):
    """Return the dialect-specific ``insert`` that supports ON CONFLICT, if any."""
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    return None


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally with ``escape="\\\\"``."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserRepository:
    """Repository for user operations."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def create(self, user: User) -> User:
        """Create a new user."""
        self.session.add(user)
        self.session.flush()
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email, matching case-insensitively."""
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.session.scalars(stmt).first()

    def get_existing_ids(self, user_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``user_ids`` that belong to registered users."""
        ids = list(user_ids)
        if not ids:
            return set()
        stmt = select(User.id).where(User.id.in_(ids))
        return set(self.session.scalars(stmt))

    def search(
        self, query: str, exclude_user_id: Optional[str] = None, limit: int = 10
    ) -> list[User]:
        """Case-insensitive substring search over name or email."""
        pattern = f"%{_escape_like(query.lower())}%"
        conditions = [
            or_(
                func.lower(User.name).like(pattern, escape="\\"),
                func.lower(User.email).like(pattern, escape="\\"),
            )
        ]
        if exclude_user_id:
            conditions.append(User.id != exclude_user_id)

        stmt = (
            select(User)
            .where(and_(*conditions))
            .order_by(User.name.asc(), User.email.asc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))


class DocumentRepository:
    """Repository for document operations."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def create(self, document: Document) -> Document:
        """Create a new document."""
        self.session.add(document)
        self.session.flush()
        return document

    def get_by_id(self, document_id: str) -> Optional[Document]:
        """Get document by ID."""
        return self.session.get(Document, document_id)

    def update(self, document: Document) -> Document:
        """Flush pending changes on an existing document."""
        self.session.flush()
        return document

    def list_for_scope(
        self,
        user_id: str,
        scope: str,
        updated_since: Optional[datetime] = None,
    ) -> list[Document]:
        """
        Build the candidate document set for a user and a scope.

        Args:
            user_id: Requesting user ID
            scope: One of "all", "owned", "shared", "recent", "archived"
            updated_since: Lower bound on updated_at, used by "recent"

        Returns:
            Documents ordered by updated_at, newest first
        """
        permitted = exists().where(
            and_(
                DocumentPermission.document_id == Document.id,
                DocumentPermission.user_id == user_id,
            )
        )
        owned = Document.author_id == user_id

        if scope == "owned":
            condition = owned
        elif scope == "shared":
            condition = and_(Document.author_id != user_id, permitted)
        elif scope == "recent":
            condition = and_(or_(owned, permitted), Document.updated_at >= updated_since)
        elif scope == "all":
            condition = or_(owned, permitted)
        else:
            # "archived" has no backing column yet
            return []

        stmt = (
            select(Document)
            .where(condition)
            .order_by(Document.updated_at.desc(), Document.id.asc())
        )
        return list(self.session.scalars(stmt).unique())


class PermissionRepository:
    """Repository for document permission rows."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def get(
        self, document_id: str, user_id: str, refresh: bool = False
    ) -> Optional[DocumentPermission]:
        """Get the permission row for a (document, user) pair."""
        stmt = select(DocumentPermission).where(
            and_(
                DocumentPermission.document_id == document_id,
                DocumentPermission.user_id == user_id,
            )
        )
        if refresh:
            # Core upserts bypass the identity map
            stmt = stmt.execution_options(populate_existing=True)
        return self.session.scalars(stmt).first()

    def get_by_document_id(self, document_id: str) -> list[DocumentPermission]:
        """Get all permission rows for a document."""
        stmt = (
            select(DocumentPermission)
            .where(DocumentPermission.document_id == document_id)
            .order_by(DocumentPermission.created_at.asc())
        )
        return list(self.session.scalars(stmt).unique())

    def levels_for_user(
        self, user_id: str, document_ids: Iterable[str]
    ) -> dict[str, PermissionLevel]:
        """Map document ID to the user's level for the given documents."""
        ids = list(document_ids)
        if not ids:
            return {}
        stmt = select(DocumentPermission.document_id, DocumentPermission.level).where(
            and_(
                DocumentPermission.user_id == user_id,
                DocumentPermission.document_id.in_(ids),
            )
        )
        return {document_id: level for document_id, level in self.session.execute(stmt)}

    def upsert(
        self,
        document_id: str,
        user_id: str,
        level: PermissionLevel,
        overwrite: bool = True,
    ) -> DocumentPermission:
        """
        Insert or update the permission row for a (document, user) pair.

        Runs as a single INSERT ... ON CONFLICT statement on PostgreSQL and
        SQLite, so concurrent callers never produce a duplicate row.

        Args:
            document_id: Document ID
            user_id: User ID
            level: Level to store
            overwrite: If True an existing row takes ``level``; if False an
                       existing row is left as it is

        Returns:
            The permission row as stored after the statement
        """
        now = utcnow()
        insert = _dialect_insert(self.session)

        if insert is None:
            permission = self.get(document_id, user_id)
            if permission is None:
                permission = DocumentPermission(
                    document_id=document_id, user_id=user_id, level=level
                )
                self.session.add(permission)
            elif overwrite:
                permission.level = level
            self.session.flush()
            return permission

        stmt = insert(DocumentPermission).values(
            id=new_id(),
            document_id=document_id,
            user_id=user_id,
            level=level,
            created_at=now,
            updated_at=now,
        )
        conflict_target = ["document_id", "user_id"]
        if overwrite:
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict_target,
                set_={"level": stmt.excluded.level, "updated_at": now},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=conflict_target)

        self.session.flush()
        self.session.execute(stmt)
        return self.get(document_id, user_id, refresh=True)

    def delete(self, document_id: str, user_id: str) -> bool:
        """Delete the permission row for a (document, user) pair."""
        permission = self.get(document_id, user_id)
        if permission:
            self.session.delete(permission)
            self.session.flush()
            return True
        return False

    def count(self, document_id: Optional[str] = None) -> int:
        """Count permission rows, optionally for one document."""
        query = select(func.count(DocumentPermission.id))
        if document_id:
            query = query.where(DocumentPermission.document_id == document_id)
        return self.session.scalar(query) or 0


class VersionRepository:
    """Repository for the append-only version trail."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def append(self, version: DocumentVersion) -> DocumentVersion:
        """Append a snapshot. Snapshots are never updated or deleted."""
        self.session.add(version)
        self.session.flush()
        return version

    def get_by_document_id(self, document_id: str) -> list[DocumentVersion]:
        """Get all snapshots for a document, newest first."""
        stmt = (
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.created_at.desc(), DocumentVersion.id.desc())
        )
        return list(self.session.scalars(stmt).unique())

    def count(self, document_id: Optional[str] = None) -> int:
        """Count snapshots, optionally for one document."""
        query = select(func.count(DocumentVersion.id))
        if document_id:
            query = query.where(DocumentVersion.document_id == document_id)
        return self.session.scalar(query) or 0


class NotificationRepository:
    """Repository for mention notifications."""

    def __init__(self, session: Session):
        """Initialize repository with a database session."""
        self.session = session

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        """Get notification by ID."""
        return self.session.get(Notification, notification_id)

    def insert_ignoring_duplicates(self, rows: list[dict[str, Any]]) -> int:
        """
        Insert notifications, skipping rows whose (user, document, message)
        already exists.

        Args:
            rows: Dicts with user_id, document_id and message

        Returns:
            Number of rows actually inserted
        """
        if not rows:
            return 0

        now = utcnow()
        values = [
            {
                "id": new_id(),
                "user_id": row["user_id"],
                "document_id": row["document_id"],
                "message": row["message"],
                "read": False,
                "created_at": now,
            }
            for row in rows
        ]

        insert = _dialect_insert(self.session)
        if insert is None:
            inserted = 0
            for value in values:
                duplicate = self.session.scalars(
                    select(Notification).where(
                        and_(
                            Notification.user_id == value["user_id"],
                            Notification.document_id == value["document_id"],
                            Notification.message == value["message"],
                        )
                    )
                ).first()
                if duplicate is None:
                    self.session.add(Notification(**value))
                    inserted += 1
            self.session.flush()
            return inserted

        stmt = (
            insert(Notification)
            .values(values)
            .on_conflict_do_nothing(index_elements=["user_id", "document_id", "message"])
        )
        result = self.session.execute(stmt)
        return max(result.rowcount or 0, 0)

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """List a user's notifications, newest first."""
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc())
        return list(self.session.scalars(stmt))

    def count(self, user_id: Optional[str] = None, document_id: Optional[str] = None) -> int:
        """Count notifications matching optional filters."""
        query = select(func.count(Notification.id))
        if user_id:
            query = query.where(Notification.user_id == user_id)
        if document_id:
            query = query.where(Notification.document_id == document_id)
        return self.session.scalar(query) or 0
