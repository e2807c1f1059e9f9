"""MCP (Model Context Protocol) server for Doc-Share.

This server exposes Doc-Share to AI agents via the Model Context Protocol.
It uses the standardized mcp library for JSON-RPC 2.0 communication over stdio
and acts on behalf of the user configured as ACTING_USER_ID.
"""

import asyncio
import logging
from typing import Optional

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp import McpError
from mcp.types import ErrorData, TextContent, Tool

from docshare import __version__
from docshare.config import Settings, get_settings
from docshare.logging_config import configure_logging
from docshare.storage.database import Database
from docshare.mcp.tool_handlers import call_tool_handler
from docshare.mcp.tool_schemas import get_tool_schemas

logger = logging.getLogger(__name__)

SERVER_NAME = "doc-share"


def create_server(db: Database, requester_id: Optional[str]) -> Server:
    """
    Build an MCP server bound to a database and an acting identity.

    Args:
        db: Database the tool handlers open sessions on
        requester_id: Identity every tool call runs as (None means unauthenticated)
    """
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available MCP tools."""
        return [Tool(**schema) for schema in get_tool_schemas().values()]

    @app.call_tool()
    async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        """Handle tool calls."""
        if arguments is None:
            arguments = {}

        try:
            # Handlers manage their own database sessions
            return await call_tool_handler(name, arguments, db, requester_id)
        except McpError:
            raise
        except Exception as e:
            logger.exception("Unexpected error handling tool %s", name)
            raise McpError(
                ErrorData(
                    code=-32603,  # Internal error
                    message=f"Internal error: {str(e)}",
                    data={"kind": "internal"},
                )
            )

    return app


async def main(settings: Settings | None = None) -> None:
    """Main entry point for MCP server."""
    settings = settings or get_settings()
    configure_logging(settings)

    db = Database(settings.get_database_url())
    if not settings.acting_user_id:
        logger.warning("ACTING_USER_ID is not set; identity-bound tools will be rejected")
    app = create_server(db, settings.acting_user_id)

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )
    finally:
        db.dispose()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
