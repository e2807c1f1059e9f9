"""MCP tool schema definitions."""

from typing import Any

_DOCUMENT_ID = {"type": "string", "description": "Document ID"}
_VISIBILITY = {
    "type": "string",
    "enum": ["PUBLIC", "PRIVATE"],
    "description": "Document visibility",
}
_CONTENT = {
    "type": "object",
    "description": "Rich-text tree: {type, attrs?, content?: [nodes], text?}",
}
_SCOPE = {
    "type": "string",
    "enum": ["all", "owned", "shared", "recent", "archived"],
    "description": "Candidate set (default: all)",
}


def get_tool_schemas() -> dict[str, dict[str, Any]]:
    """Get all MCP tool schemas."""
    return {
        "create_document": {
            "name": "create_document",
            "description": "Create a new document owned by the acting user",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Document title"},
                    "content": _CONTENT,
                    "visibility": _VISIBILITY,
                },
                "required": ["title"],
            },
        },
        "get_document": {
            "name": "get_document",
            "description": "Retrieve a document and the acting user's role on it",
            "inputSchema": {
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID},
                "required": ["document_id"],
            },
        },
        "get_public_document": {
            "name": "get_public_document",
            "description": "Retrieve a PUBLIC document without access checks",
            "inputSchema": {
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID},
                "required": ["document_id"],
            },
        },
        "update_document": {
            "name": "update_document",
            "description": (
                "Replace title, content and visibility (owner only). Records a "
                "version and shares the document with mentioned users."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "title": {"type": "string", "description": "New title"},
                    "content": _CONTENT,
                    "visibility": _VISIBILITY,
                },
                "required": ["document_id", "title", "content", "visibility"],
            },
        },
        "list_documents": {
            "name": "list_documents",
            "description": "List the acting user's documents for a dashboard scope",
            "inputSchema": {
                "type": "object",
                "properties": {"scope": _SCOPE},
            },
        },
        "list_permissions": {
            "name": "list_permissions",
            "description": "List users a document is shared with",
            "inputSchema": {
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID},
                "required": ["document_id"],
            },
        },
        "grant_permission": {
            "name": "grant_permission",
            "description": "Share a document with a user by email (owner only)",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "email": {"type": "string", "description": "Target user's email"},
                    "level": {"type": "string", "enum": ["VIEW", "EDIT"]},
                },
                "required": ["document_id", "email", "level"],
            },
        },
        "revoke_permission": {
            "name": "revoke_permission",
            "description": "Remove a user's access to a document (owner only)",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "document_id": _DOCUMENT_ID,
                    "user_id": {"type": "string", "description": "Target user ID"},
                },
                "required": ["document_id", "user_id"],
            },
        },
        "list_versions": {
            "name": "list_versions",
            "description": "List a document's version snapshots, newest first",
            "inputSchema": {
                "type": "object",
                "properties": {"document_id": _DOCUMENT_ID},
                "required": ["document_id"],
            },
        },
        "search_documents": {
            "name": "search_documents",
            "description": "Rank accessible documents by title and text matches",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Free-text query"},
                    "scope": _SCOPE,
                    "limit": {"type": "integer", "minimum": 1},
                },
                "required": ["query"],
            },
        },
        "register_user": {
            "name": "register_user",
            "description": "Register a user verified by the identity provider",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "email": {"type": "string"},
                    "name": {"type": "string"},
                    "user_id": {
                        "type": "string",
                        "description": "Optional ID (generates UUID if not provided)",
                    },
                },
                "required": ["email"],
            },
        },
        "search_users": {
            "name": "search_users",
            "description": "Suggest users to mention by name or email",
            "inputSchema": {
                "type": "object",
                "properties": {"query": {"type": "string"}},
                "required": ["query"],
            },
        },
        "list_notifications": {
            "name": "list_notifications",
            "description": "List the acting user's notifications, newest first",
            "inputSchema": {
                "type": "object",
                "properties": {"unread_only": {"type": "boolean"}},
            },
        },
        "mark_notification_read": {
            "name": "mark_notification_read",
            "description": "Mark one of the acting user's notifications as read",
            "inputSchema": {
                "type": "object",
                "properties": {"notification_id": {"type": "string"}},
                "required": ["notification_id"],
            },
        },
    }
