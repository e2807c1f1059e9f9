"""Model serialization for MCP and HTTP responses."""

from enum import Enum
from typing import Any, Optional

from sqlalchemy import inspect


def serialize_model(obj: Any) -> dict[str, Any]:
    """
    Serialize a SQLAlchemy model's column values to a dictionary.

    Relationships are left out; callers embed them explicitly.

    Args:
        obj: SQLAlchemy model instance

    Returns:
        Dictionary representation of the model
    """
    result = {}
    for column in inspect(obj).mapper.column_attrs:
        value = getattr(obj, column.key)
        if isinstance(value, Enum):
            result[column.key] = value.value
        elif hasattr(value, "isoformat"):  # datetime
            result[column.key] = value.isoformat()
        else:
            result[column.key] = value
    return result


def serialize_user(user: Any) -> dict[str, Any]:
    """Public user summary: no timestamps."""
    return {"id": user.id, "email": user.email, "name": user.name}


def serialize_document(document: Any, role: Optional[Any] = None) -> dict[str, Any]:
    """Serialize a document with its author and, when given, the requester's role."""
    result = serialize_model(document)
    result["author"] = serialize_user(document.author)
    if role is not None:
        result["role"] = role.value
    return result


def serialize_permission(permission: Any) -> dict[str, Any]:
    result = serialize_model(permission)
    result["user"] = serialize_user(permission.user)
    return result


def serialize_version(version: Any) -> dict[str, Any]:
    result = serialize_model(version)
    result["author"] = serialize_user(version.author)
    return result


def serialize_search_results(results: Any) -> dict[str, Any]:
    """Serialize ranked search results with the pre-truncation total."""
    return {
        "query": results.query,
        "scope": results.scope.value,
        "total": results.total,
        "results": [
            {
                "id": r.document.id,
                "title": r.document.title,
                "visibility": r.document.visibility.value,
                "updated_at": r.document.updated_at.isoformat(),
                "author": serialize_user(r.document.author),
                "permission": r.permission,
                "is_owner": r.is_owner,
                "relevance_score": r.relevance_score,
                "title_highlight": r.title_highlight,
                "content_preview": r.content_preview,
            }
            for r in results.results
        ],
    }
