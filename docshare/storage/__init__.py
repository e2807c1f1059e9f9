"""Storage layer for Doc-Share."""

from docshare.storage.database import Database
from docshare.storage.repositories import (
    DocumentRepository,
    NotificationRepository,
    PermissionRepository,
    UserRepository,
    VersionRepository,
)

__all__ = [
    "Database",
    "UserRepository",
    "DocumentRepository",
    "PermissionRepository",
    "VersionRepository",
    "NotificationRepository",
]
