"""Shared pytest fixtures and test utilities for Doc-Share tests."""

import os
import tempfile
from typing import Any, Generator

import pytest

from docshare.services.document_service import DocumentService
from docshare.services.user_service import UserService
from docshare.storage.database import Database


@pytest.fixture(scope="function")
def temp_db() -> Generator[Database, None, None]:
    """
    Create a temporary SQLite database for testing.

    Yields:
        Database instance with tables created
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    database = Database(f"sqlite:///{db_path}")
    database.create_tables()

    yield database

    # Cleanup
    database.drop_tables()
    database.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def db_session(temp_db):
    """Get a database session from temp_db."""
    with temp_db.session() as session:
        yield session


@pytest.fixture
def users(db_session):
    """Register alice (owner of most fixtures), bob and carol."""
    service = UserService(db_session)
    return {
        "alice": service.register_user("alice@example.com", "Alice"),
        "bob": service.register_user("bob@example.com", "Bob"),
        "carol": service.register_user("carol@example.com", None),
    }


@pytest.fixture
def document_service(db_session):
    """Create a document service instance."""
    return DocumentService(db_session)


@pytest.fixture
def sample_document(document_service, users):
    """A private document owned by alice."""
    return document_service.create_document(
        users["alice"].id,
        title="Sample Document",
        content=ContentBuilder.doc(ContentBuilder.paragraph("Hello world")),
    )


class ContentBuilder:
    """Utility class for building rich-text trees."""

    @staticmethod
    def text(value: str) -> dict[str, Any]:
        return {"type": "text", "text": value}

    @staticmethod
    def mention(user_id: str, node_type: str = "mention") -> dict[str, Any]:
        return {"type": node_type, "attrs": {"id": user_id, "label": user_id}}

    @staticmethod
    def paragraph(*children: Any) -> dict[str, Any]:
        """Paragraph node; plain strings become text nodes."""
        nodes = [ContentBuilder.text(c) if isinstance(c, str) else c for c in children]
        return {"type": "paragraph", "content": nodes}

    @staticmethod
    def doc(*blocks: dict[str, Any]) -> dict[str, Any]:
        return {"type": "doc", "content": list(blocks)}


@pytest.fixture
def build():
    """Expose ContentBuilder to tests."""
    return ContentBuilder
