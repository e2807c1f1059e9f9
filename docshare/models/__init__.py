"""Database models for Doc-Share."""

from docshare.models.base import Base
from docshare.models.document import Document
from docshare.models.enums import PermissionLevel, Scope, Visibility
from docshare.models.notification import Notification
from docshare.models.permission import DocumentPermission
from docshare.models.user import User
from docshare.models.version import DocumentVersion

__all__ = [
    "Base",
    "User",
    "Document",
    "DocumentPermission",
    "DocumentVersion",
    "Notification",
    "PermissionLevel",
    "Scope",
    "Visibility",
]
