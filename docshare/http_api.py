"""HTTP API for Doc-Share: REST routes plus MCP JSON-RPC over POST."""

import json
import logging
from typing import Any, Dict, Iterator, Optional

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from mcp import McpError
from mcp.types import TextContent
from pydantic import BaseModel
from sqlalchemy.orm import Session

from docshare import __version__
from docshare.config import Settings, get_settings
from docshare.exceptions import DocShareError, DuplicateError
from docshare.logging_config import configure_logging
from docshare.mcp.serializers import (
    serialize_document,
    serialize_model,
    serialize_permission,
    serialize_search_results,
    serialize_user,
    serialize_version,
)
from docshare.mcp.tool_handlers import call_tool_handler
from docshare.mcp.tool_schemas import get_tool_schemas
from docshare.models.enums import Scope, Visibility
from docshare.request_logging import RequestLoggingMiddleware
from docshare.services.document_service import DocumentService
from docshare.services.notification_service import NotificationService
from docshare.services.permission_service import PermissionService
from docshare.services.search_service import SearchService
from docshare.services.user_service import UserService
from docshare.services.version_service import VersionService
from docshare.storage.database import Database

logger = logging.getLogger(__name__)

# HTTP status per error kind
ERROR_STATUS = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_argument": status.HTTP_400_BAD_REQUEST,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# Request bodies accept loosely typed fields; the services validate them
class DocumentCreate(BaseModel):
    title: Any = None
    content: Optional[Any] = None
    visibility: Any = Visibility.PRIVATE.value


class DocumentUpdate(BaseModel):
    title: Any = None
    content: Any = None
    visibility: Any = None


class PermissionGrant(BaseModel):
    email: Any = None
    level: Any = None


class UserRegistration(BaseModel):
    email: Any = None
    name: Optional[str] = None
    user_id: Optional[str] = None


def get_session(request: Request) -> Iterator[Session]:
    """Open a session on the app's database for the duration of a request."""
    session = request.app.state.db.get_session()
    try:
        yield session
    finally:
        session.close()


def get_requester_id(request: Request) -> Optional[str]:
    """Read the verified identity injected by the upstream gateway."""
    settings: Settings = request.app.state.settings
    requester_id = request.headers.get(settings.identity_header) or None
    if requester_id:
        request.state.user_id = requester_id
    return requester_id


def _error_response(error: DocShareError) -> JSONResponse:
    if isinstance(error, DuplicateError):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    body: dict[str, Any] = {"kind": error.kind, "message": str(error)}
    field = getattr(error, "field", None)
    if field:
        body["field"] = field
    return JSONResponse(status_code=status_code, content={"error": body})


def create_app(db: Database | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        db: Database to serve from. If None, one is created from settings.
        settings: Application settings (defaults to cached settings)
    """
    settings = settings or get_settings()
    if db is None:
        db = Database(settings.get_database_url())

    app = FastAPI(
        title="Doc-Share",
        description="Document sharing, version history, mention auto-sharing and search",
        version=__version__,
    )
    app.state.db = db
    app.state.settings = settings
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(DocShareError)
    async def handle_docshare_error(request: Request, exc: DocShareError) -> JSONResponse:
        if exc.kind == "internal":
            logger.error("Request failed: %s", exc)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        body = {
            "kind": "invalid_argument",
            "message": "Malformed request",
            "details": jsonable_encoder(exc.errors()),
        }
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": body})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = {"kind": "internal", "message": "Internal server error"}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": body})

    # Users
    @app.post("/users", status_code=status.HTTP_201_CREATED)
    def register_user(payload: UserRegistration, session: Session = Depends(get_session)):
        user = UserService(session).register_user(payload.email, payload.name, payload.user_id)
        return serialize_user(user)

    @app.get("/users/search")
    def search_users(
        q: str = "",
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        users = UserService(session).search_users(requester_id, q)
        return {"users": [serialize_user(u) for u in users]}

    # Documents
    @app.post("/documents", status_code=status.HTTP_201_CREATED)
    def create_document(
        payload: DocumentCreate,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        doc = DocumentService(session, settings).create_document(
            requester_id, payload.title, payload.content, payload.visibility
        )
        return serialize_document(doc)

    @app.get("/documents")
    def list_documents(
        scope: str = Scope.ALL.value,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        listings = DocumentService(session, settings).list_documents(requester_id, scope)
        return {"documents": [serialize_document(i.document, i.role) for i in listings]}

    @app.get("/documents/{document_id}")
    def get_document(
        document_id: str,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        access = DocumentService(session, settings).get_document(document_id, requester_id)
        return serialize_document(access.document, access.role)

    @app.put("/documents/{document_id}")
    def update_document(
        document_id: str,
        payload: DocumentUpdate,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        doc = DocumentService(session, settings).update_document(
            document_id, requester_id, payload.title, payload.content, payload.visibility
        )
        return serialize_document(doc)

    @app.get("/public/documents/{document_id}")
    def get_public_document(document_id: str, session: Session = Depends(get_session)):
        return serialize_document(DocumentService(session, settings).get_public_document(document_id))

    # Permissions
    @app.get("/documents/{document_id}/permissions")
    def list_permissions(
        document_id: str,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        permissions = PermissionService(session).list_permissions(document_id, requester_id)
        return {"permissions": [serialize_permission(p) for p in permissions]}

    @app.post("/documents/{document_id}/permissions")
    def grant_permission(
        document_id: str,
        payload: PermissionGrant,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        grant = PermissionService(session).grant_permission(
            document_id, requester_id, payload.email, payload.level
        )
        return JSONResponse(
            status_code=status.HTTP_201_CREATED if grant.created else status.HTTP_200_OK,
            content=serialize_permission(grant.permission),
        )

    @app.delete("/documents/{document_id}/permissions/{user_id}")
    def revoke_permission(
        document_id: str,
        user_id: str,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        PermissionService(session).revoke_permission(document_id, requester_id, user_id)
        return {"revoked": True}

    # Versions
    @app.get("/documents/{document_id}/versions")
    def list_versions(
        document_id: str,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        versions = VersionService(session).list_versions(document_id, requester_id)
        return {"versions": [serialize_version(v) for v in versions]}

    # Search
    @app.get("/search")
    def search(
        q: str = "",
        scope: str = Scope.ALL.value,
        limit: Optional[int] = None,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        results = SearchService(session, settings).search(requester_id, q, scope, limit)
        return serialize_search_results(results)

    # Notifications
    @app.get("/notifications")
    def list_notifications(
        unread_only: bool = False,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        notifications = NotificationService(session).list_notifications(requester_id, unread_only)
        return {"notifications": [serialize_model(n) for n in notifications]}

    @app.post("/notifications/{notification_id}/read")
    def mark_notification_read(
        notification_id: str,
        requester_id: Optional[str] = Depends(get_requester_id),
        session: Session = Depends(get_session),
    ):
        notification = NotificationService(session).mark_read(requester_id, notification_id)
        return serialize_model(notification)

    # MCP over HTTP
    @app.post("/mcp")
    async def mcp_post(request: Request, payload: dict = Body(...)):
        """JSON-RPC endpoint for MCP clients."""
        return await handle_jsonrpc_request(payload, db, get_requester_id(request))

    @app.post("/mcp/sse")
    async def mcp_sse_post(request: Request, payload: dict = Body(...)):
        """JSON-RPC endpoint answering in Server-Sent Events framing."""
        result = await handle_jsonrpc_request(payload, db, get_requester_id(request))
        return StreamingResponse(
            content=f"data: {json.dumps(result)}\n\n", media_type="text/event-stream"
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "doc-share"}

    return app


async def handle_jsonrpc_request(
    request: Dict[str, Any], db: Database, requester_id: Optional[str]
) -> Dict[str, Any]:
    """Handle JSON-RPC 2.0 request."""
    jsonrpc = request.get("jsonrpc", "2.0")
    request_id = request.get("id")
    method = request.get("method")
    params = request.get("params") or {}

    if method == "initialize":
        return {
            "jsonrpc": jsonrpc,
            "id": request_id,
            "result": {
                "protocolVersion": "2024-11-05",
                "capabilities": {"tools": {}},
                "serverInfo": {"name": "doc-share", "version": __version__},
            },
        }
    elif method == "tools/list":
        tools = [
            {
                "name": tool_def["name"],
                "description": tool_def["description"],
                "inputSchema": tool_def["inputSchema"],
            }
            for tool_def in get_tool_schemas().values()
        ]
        return {"jsonrpc": jsonrpc, "id": request_id, "result": {"tools": tools}}
    elif method == "tools/call":
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        try:
            result = await call_tool_handler(tool_name, arguments, db, requester_id)
        except McpError as e:
            error: Dict[str, Any] = {"code": e.error.code, "message": e.error.message}
            if e.error.data is not None:
                error["data"] = e.error.data
            return {"jsonrpc": jsonrpc, "id": request_id, "error": error}

        content = [
            {"type": "text", "text": item.text}
            for item in result
            if isinstance(item, TextContent)
        ]
        return {"jsonrpc": jsonrpc, "id": request_id, "result": {"content": content}}
    else:
        return {
            "jsonrpc": jsonrpc,
            "id": request_id,
            "error": {"code": -32601, "message": f"Method not found: {method}"},
        }


def run() -> None:
    """Console-script entry point."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=8005)


if __name__ == "__main__":
    run()
