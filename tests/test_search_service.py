"""Tests for the search engine."""

from datetime import timedelta

import pytest

pytestmark = pytest.mark.unit

from docshare.config import Settings
from docshare.exceptions import DatabaseError, UnauthenticatedError, ValidationError
from docshare.models.base import utcnow
from docshare.models.enums import PermissionLevel, Scope
from docshare.services.search_service import SearchService
from docshare.storage.repositories import PermissionRepository


@pytest.fixture
def search(db_session):
    """Create a search service instance."""
    return SearchService(db_session, Settings(search_default_limit=20, search_max_limit=100))


@pytest.fixture
def corpus(db_session, document_service, users, build):
    """Alice owns two documents; Bob owns one shared with Alice at VIEW."""
    alice, bob = users["alice"], users["bob"]
    report = document_service.create_document(
        alice.id, "Alpha Report", build.doc(build.paragraph("Quarterly figures"))
    )
    beta = document_service.create_document(
        alice.id, "Beta", build.doc(build.paragraph("lorem ipsum alpha notes"))
    )
    gamma = document_service.create_document(
        bob.id, "Gamma", build.doc(build.paragraph("more alpha from bob"))
    )
    document_service.create_document(bob.id, "Alpha private to bob")
    PermissionRepository(db_session).upsert(gamma.id, alice.id, PermissionLevel.VIEW)
    db_session.commit()
    return {"report": report, "beta": beta, "gamma": gamma}


class TestRanking:
    """Tests for matching and ordering."""

    def test_title_match_ranks_first(self, search, users, corpus):
        results = search.search(users["alice"].id, "alpha")
        titles = [r.document.title for r in results.results]

        assert titles[0] == "Alpha Report"
        assert results.results[0].relevance_score == 2
        assert {r.relevance_score for r in results.results[1:]} == {1}
        assert set(titles) == {"Alpha Report", "Beta", "Gamma"}
        assert results.total == 3

    def test_equal_scores_newest_first(self, db_session, search, users, corpus):
        corpus["beta"].updated_at = utcnow() - timedelta(days=2)
        corpus["gamma"].updated_at = utcnow() - timedelta(days=1)
        db_session.commit()

        titles = [r.document.title for r in search.search(users["alice"].id, "alpha").results]
        assert titles == ["Alpha Report", "Gamma", "Beta"]

    def test_case_insensitive(self, search, users, corpus):
        assert search.search(users["alice"].id, "ALPHA").total == 3

    def test_no_matches(self, search, users, corpus):
        results = search.search(users["alice"].id, "zeta")
        assert results.results == []
        assert results.total == 0

    def test_inaccessible_documents_never_returned(self, search, users, corpus):
        titles = [r.document.title for r in search.search(users["alice"].id, "alpha").results]
        assert "Alpha private to bob" not in titles

    def test_grant_revoked_mid_search_is_skipped(self, search, users, corpus, monkeypatch):
        monkeypatch.setattr(search.permission_repo, "levels_for_user", lambda user_id, ids: {})

        titles = [r.document.title for r in search.search(users["alice"].id, "alpha").results]

        assert titles == ["Alpha Report", "Beta"]

    def test_store_failure_is_database_error(self, search, users, corpus, monkeypatch):
        def fail(*args, **kwargs):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(search.document_repo, "list_for_scope", fail)
        with pytest.raises(DatabaseError, match="connection lost"):
            search.search(users["alice"].id, "alpha")


class TestAnnotations:
    """Tests for highlights, previews and permission annotations."""

    def test_highlight_and_preview(self, search, users, corpus):
        by_title = {r.document.title: r for r in search.search(users["alice"].id, "alpha").results}

        assert by_title["Alpha Report"].title_highlight == "<mark>Alpha</mark> Report"
        assert by_title["Alpha Report"].content_preview == "Quarterly figures"
        assert by_title["Beta"].content_preview == "lorem ipsum <mark>alpha</mark> notes"

    def test_permission_annotation(self, search, users, corpus):
        by_title = {r.document.title: r for r in search.search(users["alice"].id, "alpha").results}
        assert by_title["Alpha Report"].permission == "OWNER"
        assert by_title["Alpha Report"].is_owner
        assert by_title["Gamma"].permission == "VIEW"


class TestScopes:
    """Tests for scope filters."""

    def test_owned_excludes_shared(self, search, users, corpus):
        results = search.search(users["alice"].id, "alpha", scope="owned")
        assert {r.document.title for r in results.results} == {"Alpha Report", "Beta"}

    def test_shared_only(self, search, users, corpus):
        results = search.search(users["alice"].id, "alpha", scope=Scope.SHARED)
        assert [r.document.title for r in results.results] == ["Gamma"]

    def test_recent_window(self, db_session, search, users, corpus):
        corpus["beta"].updated_at = utcnow() - timedelta(days=31)
        db_session.commit()
        titles = {r.document.title for r in search.search(users["alice"].id, "alpha", "recent").results}
        assert titles == {"Alpha Report", "Gamma"}

    def test_archived_is_empty(self, search, users, corpus):
        results = search.search(users["alice"].id, "alpha", scope="archived")
        assert results.results == []
        assert results.total == 0

    def test_unknown_scope(self, search, users, corpus):
        with pytest.raises(ValidationError):
            search.search(users["alice"].id, "alpha", scope="deleted")


class TestQueryAndLimit:
    """Tests for blank queries and truncation."""

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_is_empty_not_error(self, search, users, corpus, query):
        results = search.search(users["alice"].id, query)
        assert results.results == []
        assert results.total == 0

    def test_limit_applied_after_ranking(self, search, users, corpus):
        results = search.search(users["alice"].id, "alpha", limit=1)
        assert [r.document.title for r in results.results] == ["Alpha Report"]
        assert results.total == 3

    @pytest.mark.parametrize("limit", [0, -1, 101, "5", True])
    def test_invalid_limit(self, search, users, limit):
        with pytest.raises(ValidationError):
            search.search(users["alice"].id, "alpha", limit=limit)

    def test_requires_identity(self, search):
        with pytest.raises(UnauthenticatedError):
            search.search(None, "alpha")
