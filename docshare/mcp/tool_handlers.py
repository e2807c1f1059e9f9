"""MCP tool handlers for executing tool operations."""

import json
import logging
from typing import Any, Awaitable, Callable, Optional

from mcp import McpError
from mcp.types import ErrorData, TextContent

from docshare.exceptions import DocShareError, DuplicateError, ValidationError
from docshare.models.enums import Scope, Visibility
from docshare.services.document_service import DocumentService
from docshare.services.notification_service import NotificationService
from docshare.services.permission_service import PermissionService
from docshare.services.search_service import SearchService
from docshare.services.user_service import UserService
from docshare.services.version_service import VersionService
from docshare.mcp.serializers import (
    serialize_document,
    serialize_model,
    serialize_permission,
    serialize_search_results,
    serialize_user,
    serialize_version,
)

logger = logging.getLogger(__name__)

# JSON-RPC error code per error kind
ERROR_CODES = {
    "unauthenticated": -32004,
    "forbidden": -32003,
    "not_found": -32001,
    "invalid_argument": -32602,
    "internal": -32603,
}
DUPLICATE_CODE = -32002

ToolHandler = Callable[[dict[str, Any], Any, Optional[str]], Awaitable[list[TextContent]]]


def _text(result: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


def _required(arguments: dict[str, Any], key: str) -> Any:
    if arguments.get(key) is None:
        raise ValidationError(f"{key} is required", key)
    return arguments[key]


# Document handlers
async def handle_create_document(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle create_document tool."""
    with db.session() as session:
        doc = DocumentService(session).create_document(
            requester_id,
            title=_required(arguments, "title"),
            content=arguments.get("content"),
            visibility=arguments.get("visibility", Visibility.PRIVATE),
        )
        return _text(serialize_document(doc))


async def handle_get_document(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle get_document tool."""
    with db.session() as session:
        access = DocumentService(session).get_document(
            _required(arguments, "document_id"), requester_id
        )
        return _text(serialize_document(access.document, access.role))


async def handle_get_public_document(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle get_public_document tool."""
    with db.session() as session:
        doc = DocumentService(session).get_public_document(_required(arguments, "document_id"))
        return _text(serialize_document(doc))


async def handle_update_document(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle update_document tool."""
    with db.session() as session:
        doc = DocumentService(session).update_document(
            _required(arguments, "document_id"),
            requester_id,
            title=arguments.get("title"),
            content=arguments.get("content"),
            visibility=arguments.get("visibility"),
        )
        return _text(serialize_document(doc))


async def handle_list_documents(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle list_documents tool."""
    with db.session() as session:
        listings = DocumentService(session).list_documents(
            requester_id, scope=arguments.get("scope", Scope.ALL)
        )
        result = {
            "documents": [serialize_document(item.document, item.role) for item in listings]
        }
        return _text(result)


# Permission handlers
async def handle_list_permissions(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle list_permissions tool."""
    with db.session() as session:
        permissions = PermissionService(session).list_permissions(
            _required(arguments, "document_id"), requester_id
        )
        return _text({"permissions": [serialize_permission(p) for p in permissions]})


async def handle_grant_permission(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle grant_permission tool."""
    with db.session() as session:
        grant = PermissionService(session).grant_permission(
            _required(arguments, "document_id"),
            requester_id,
            email=arguments.get("email"),
            level=arguments.get("level"),
        )
        result = serialize_permission(grant.permission)
        result["created"] = grant.created
        return _text(result)


async def handle_revoke_permission(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle revoke_permission tool."""
    with db.session() as session:
        PermissionService(session).revoke_permission(
            _required(arguments, "document_id"),
            requester_id,
            user_id=arguments.get("user_id"),
        )
        return _text({"revoked": True})


# Version handlers
async def handle_list_versions(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle list_versions tool."""
    with db.session() as session:
        versions = VersionService(session).list_versions(
            _required(arguments, "document_id"), requester_id
        )
        return _text({"versions": [serialize_version(v) for v in versions]})


# Search handlers
async def handle_search_documents(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle search_documents tool."""
    with db.session() as session:
        results = SearchService(session).search(
            requester_id,
            arguments.get("query"),
            scope=arguments.get("scope", Scope.ALL),
            limit=arguments.get("limit"),
        )
        return _text(serialize_search_results(results))


# User handlers
async def handle_register_user(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle register_user tool."""
    with db.session() as session:
        user = UserService(session).register_user(
            email=arguments.get("email"),
            name=arguments.get("name"),
            user_id=arguments.get("user_id"),
        )
        return _text(serialize_user(user))


async def handle_search_users(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle search_users tool."""
    with db.session() as session:
        users = UserService(session).search_users(requester_id, arguments.get("query"))
        return _text({"users": [serialize_user(u) for u in users]})


# Notification handlers
async def handle_list_notifications(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle list_notifications tool."""
    with db.session() as session:
        notifications = NotificationService(session).list_notifications(
            requester_id, unread_only=bool(arguments.get("unread_only", False))
        )
        return _text({"notifications": [serialize_model(n) for n in notifications]})


async def handle_mark_notification_read(
    arguments: dict[str, Any], db: Any, requester_id: Optional[str]
) -> list[TextContent]:
    """Handle mark_notification_read tool."""
    with db.session() as session:
        notification = NotificationService(session).mark_read(
            requester_id, _required(arguments, "notification_id")
        )
        return _text(serialize_model(notification))


# Tool handler registry
TOOL_HANDLERS: dict[str, ToolHandler] = {
    "create_document": handle_create_document,
    "get_document": handle_get_document,
    "get_public_document": handle_get_public_document,
    "update_document": handle_update_document,
    "list_documents": handle_list_documents,
    "list_permissions": handle_list_permissions,
    "grant_permission": handle_grant_permission,
    "revoke_permission": handle_revoke_permission,
    "list_versions": handle_list_versions,
    "search_documents": handle_search_documents,
    "register_user": handle_register_user,
    "search_users": handle_search_users,
    "list_notifications": handle_list_notifications,
    "mark_notification_read": handle_mark_notification_read,
}


def to_mcp_error(error: DocShareError) -> McpError:
    """Translate a domain error into an McpError carrying its kind."""
    if isinstance(error, DuplicateError):
        code = DUPLICATE_CODE
    else:
        code = ERROR_CODES.get(error.kind, ERROR_CODES["internal"])
    data: dict[str, Any] = {"kind": error.kind}
    field = getattr(error, "field", None)
    if field:
        data["field"] = field
    return McpError(ErrorData(code=code, message=str(error), data=data))


async def call_tool_handler(
    tool_name: str,
    arguments: dict[str, Any],
    db: Any,
    requester_id: Optional[str] = None,
) -> list[TextContent]:
    """
    Route tool call to appropriate handler.

    Args:
        tool_name: Name of the tool to call
        arguments: Tool arguments
        db: Database instance
        requester_id: Verified identity of the caller, if any

    Returns:
        List of TextContent responses

    Raises:
        McpError: If tool name is unknown or handler raises an error
    """
    if tool_name not in TOOL_HANDLERS:
        raise McpError(
            ErrorData(
                code=-32601,  # Method not found
                message=f"Unknown tool: {tool_name}",
            )
        )

    handler = TOOL_HANDLERS[tool_name]

    try:
        return await handler(arguments, db, requester_id)
    except McpError:
        raise
    except DocShareError as e:
        if e.kind == "internal":
            logger.exception("Tool %s failed", tool_name)
        raise to_mcp_error(e) from e
    except Exception as e:
        logger.exception("Unexpected error handling tool %s", tool_name)
        raise McpError(
            ErrorData(
                code=ERROR_CODES["internal"],
                message=f"Internal error: {str(e)}",
                data={"kind": "internal"},
            )
        ) from e
