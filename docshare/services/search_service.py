"""Search engine: in-request scan, rank and highlight over accessible documents."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy.orm import Session

from docshare.config import Settings, get_settings
from docshare.exceptions import DatabaseError, DocShareError, ValidationError
from docshare.models.base import utcnow
from docshare.models.document import Document
from docshare.models.enums import Scope
from docshare.services.access_service import AccessResolver
from docshare.services.content.preview import build_preview, flatten_text, highlight
from docshare.services.content.tree import ContentNode
from docshare.services.document_service import parse_scope
from docshare.storage.repositories import DocumentRepository, PermissionRepository

TITLE_MATCH_SCORE = 2
CONTENT_MATCH_SCORE = 1


@dataclass(frozen=True)
class SearchResult:
    """One ranked match."""

    document: Document
    permission: str  # OWNER, EDIT or VIEW
    relevance_score: int
    title_highlight: str
    content_preview: str

    @property
    def is_owner(self) -> bool:
        return self.permission == "OWNER"


@dataclass
class SearchResults:
    """Ranked matches plus the number of matches before truncation."""

    query: str
    scope: Scope
    results: list[SearchResult] = field(default_factory=list)
    total: int = 0


class SearchService:
    """Ranks and highlights the requester's documents against a free-text query."""

    def __init__(self, session: Session, settings: Settings | None = None):
        """
        Initialize search service with database session.

        Args:
            session: SQLAlchemy database session
            settings: Application settings (defaults to cached settings)
        """
        self.session = session
        self.settings = settings or get_settings()
        self.document_repo = DocumentRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.access = AccessResolver(session)

    def search(
        self,
        requester_id: Optional[str],
        query: Optional[str],
        scope: Any = Scope.ALL,
        limit: Optional[int] = None,
    ) -> SearchResults:
        """
        Search documents visible to the requester.

        Matching is a case-insensitive substring test against the title and
        the flattened paragraph text. A title match scores 2, a content-only
        match 1. Results are ordered by score, then most recently updated,
        and truncated to ``limit`` after sorting.

        Args:
            requester_id: Verified user ID
            query: Free-text query; blank returns no results
            scope: all, owned, shared, recent or archived
            limit: Maximum results (default from settings)

        Raises:
            UnauthenticatedError: If the requester is not identified
            ValidationError: If scope or limit is invalid
            DatabaseError: If database operation fails
        """
        scope = parse_scope(scope)
        limit = self._validate_limit(limit)
        query = query or ""

        try:
            user = self.access.authenticate(requester_id)
            if not query.strip() or scope is Scope.ARCHIVED:
                return SearchResults(query=query, scope=scope)

            updated_since = utcnow() - timedelta(days=self.settings.recent_window_days)
            candidates = self.document_repo.list_for_scope(user.id, scope.value, updated_since)
            levels = self.permission_repo.levels_for_user(
                user.id, [d.id for d in candidates if d.author_id != user.id]
            )
        except DocShareError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to search documents: {str(e)}", e) from e

        needle = query.lower()
        matches: list[SearchResult] = []
        for document in candidates:
            text = flatten_text(ContentNode.from_dict(document.content))
            title_match = needle in document.title.lower()
            if not title_match and needle not in text.lower():
                continue

            if document.author_id == user.id:
                permission = "OWNER"
            else:
                level = levels.get(document.id)
                if level is None:
                    continue
                permission = level.value

            matches.append(
                SearchResult(
                    document=document,
                    permission=permission,
                    relevance_score=TITLE_MATCH_SCORE if title_match else CONTENT_MATCH_SCORE,
                    title_highlight=self._highlight(document.title, query),
                    content_preview=self._highlight(
                        build_preview(
                            text,
                            query,
                            context_chars=self.settings.preview_context_chars,
                            fallback_chars=self.settings.preview_fallback_chars,
                        ),
                        query,
                    ),
                )
            )

        # Candidates arrive newest first; a stable sort keeps that as the tie-break
        matches.sort(key=lambda result: result.relevance_score, reverse=True)

        return SearchResults(query=query, scope=scope, results=matches[:limit], total=len(matches))

    def _highlight(self, text: str, query: str) -> str:
        return highlight(text, query, self.settings.highlight_open, self.settings.highlight_close)

    def _validate_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.settings.search_default_limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError("limit must be an integer", "limit")
        if limit < 1 or limit > self.settings.search_max_limit:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.search_max_limit}", "limit"
            )
        return limit
