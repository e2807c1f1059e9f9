"""MCP module with tool schemas, handlers, and serializers."""

from docshare.mcp.tool_handlers import TOOL_HANDLERS, call_tool_handler, to_mcp_error
from docshare.mcp.tool_schemas import get_tool_schemas
from docshare.mcp.serializers import serialize_document, serialize_model

__all__ = [
    "call_tool_handler",
    "to_mcp_error",
    "TOOL_HANDLERS",
    "get_tool_schemas",
    "serialize_model",
    "serialize_document",
]
