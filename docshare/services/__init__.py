"""Service layer for business logic and validation."""

from docshare.services.access_service import AccessResolver, DocumentAccess, Role
from docshare.services.document_service import DocumentListing, DocumentService
from docshare.services.notification_service import NotificationService
from docshare.services.permission_service import GrantResult, PermissionService
from docshare.services.search_service import SearchResult, SearchResults, SearchService
from docshare.services.user_service import UserService
from docshare.services.version_service import VersionService

__all__ = [
    "AccessResolver",
    "DocumentAccess",
    "Role",
    "DocumentService",
    "DocumentListing",
    "PermissionService",
    "GrantResult",
    "VersionService",
    "SearchService",
    "SearchResult",
    "SearchResults",
    "UserService",
    "NotificationService",
]
