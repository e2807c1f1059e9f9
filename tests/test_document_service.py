"""Tests for document creation, retrieval, update and listings."""

from datetime import timedelta

import pytest

pytestmark = pytest.mark.unit

from docshare.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from docshare.models.base import utcnow
from docshare.models.enums import PermissionLevel, Visibility
from docshare.models.version import DocumentVersion
from docshare.services.access_service import Role
from docshare.services.document_service import DocumentService
from docshare.services.version_service import VersionService
from docshare.storage.repositories import PermissionRepository, VersionRepository


@pytest.fixture
def service(db_session):
    """Document service without post-update hooks."""
    return DocumentService(db_session, post_update_hooks=[])


class TestCreateDocument:
    """Tests for document creation."""

    def test_create_document_defaults(self, db_session, service, users):
        """Minimal creation yields an empty private document and no version."""
        doc = service.create_document(users["alice"].id, title="Test Document")
        assert doc.id is not None
        assert doc.author_id == users["alice"].id
        assert doc.visibility is Visibility.PRIVATE
        assert doc.content == {"type": "doc", "content": []}
        assert VersionRepository(db_session).count(doc.id) == 0

    def test_create_document_with_content(self, service, users, build):
        content = build.doc(build.paragraph("Hello"))
        doc = service.create_document(users["alice"].id, "Doc", content, "PUBLIC")
        assert doc.content == content
        assert doc.visibility is Visibility.PUBLIC

    @pytest.mark.parametrize("title", [None, "", "   ", 42, "x" * 501])
    def test_create_document_invalid_title(self, service, users, title):
        with pytest.raises(ValidationError):
            service.create_document(users["alice"].id, title=title)

    def test_create_document_invalid_visibility(self, service, users):
        with pytest.raises(ValidationError):
            service.create_document(users["alice"].id, "Doc", visibility="SECRET")

    def test_create_document_unauthenticated(self, service):
        with pytest.raises(UnauthenticatedError):
            service.create_document(None, title="Doc")


class TestGetDocument:
    """Tests for document retrieval."""

    def test_owner_gets_document_and_role(self, service, users, sample_document):
        access = service.get_document(sample_document.id, users["alice"].id)
        assert access.role is Role.OWNER
        assert access.document.title == "Sample Document"

    def test_stranger_gets_not_found(self, service, users, sample_document):
        with pytest.raises(NotFoundError):
            service.get_document(sample_document.id, users["bob"].id)

    def test_public_view(self, service, users, sample_document, build):
        with pytest.raises(NotFoundError):
            service.get_public_document(sample_document.id)

        service.update_document(
            sample_document.id, users["alice"].id, "Sample Document", build.doc(), "PUBLIC"
        )
        assert service.get_public_document(sample_document.id).id == sample_document.id


class TestUpdateDocument:
    """Tests for document updates and the version trail."""

    def test_update_replaces_fields_and_records_version(
        self, db_session, service, users, sample_document, build
    ):
        content = build.doc(build.paragraph("New body"))
        doc = service.update_document(
            sample_document.id, users["alice"].id, "Renamed", content, "PUBLIC"
        )

        assert doc.title == "Renamed"
        assert doc.content == content
        assert doc.visibility is Visibility.PUBLIC

        versions = VersionService(db_session).list_versions(doc.id, users["alice"].id)
        assert len(versions) == 1
        assert versions[0].content == content
        assert versions[0].author.email == "alice@example.com"

    def test_n_updates_produce_n_versions_newest_first(
        self, db_session, service, users, sample_document, build
    ):
        for i in range(3):
            service.update_document(
                sample_document.id,
                users["alice"].id,
                "Doc",
                build.doc(build.paragraph(f"rev {i}")),
                "PRIVATE",
            )

        versions = VersionService(db_session).list_versions(sample_document.id, users["alice"].id)
        assert len(versions) == 3
        timestamps = [v.created_at for v in versions]
        assert timestamps == sorted(timestamps, reverse=True)
        assert versions[0].content["content"][0]["content"][0]["text"] == "rev 2"

    def test_snapshot_is_a_copy(self, db_session, service, users, sample_document, build):
        """Mutating the caller's dict afterwards does not touch stored content."""
        content = build.doc(build.paragraph("original"))
        service.update_document(sample_document.id, users["alice"].id, "Doc", content, "PRIVATE")
        content["content"].clear()

        version = db_session.query(DocumentVersion).one()
        db_session.refresh(version)
        assert version.content["content"][0]["content"][0]["text"] == "original"

    @pytest.mark.parametrize("level", [None, PermissionLevel.VIEW, PermissionLevel.EDIT])
    def test_non_owner_forbidden_without_version(
        self, db_session, service, users, sample_document, build, level
    ):
        if level is not None:
            PermissionRepository(db_session).upsert(sample_document.id, users["bob"].id, level)
            db_session.commit()

        with pytest.raises(ForbiddenError):
            service.update_document(
                sample_document.id, users["bob"].id, "Hijacked", build.doc(), "PRIVATE"
            )

        assert VersionRepository(db_session).count(sample_document.id) == 0
        db_session.refresh(sample_document)
        assert sample_document.title == "Sample Document"

    def test_missing_document_forbidden(self, service, users, build):
        with pytest.raises(ForbiddenError):
            service.update_document("missing", users["alice"].id, "T", build.doc(), "PRIVATE")

    @pytest.mark.parametrize(
        "title,content,visibility",
        [
            (None, {"type": "doc"}, "PRIVATE"),
            ("T", None, "PRIVATE"),
            ("T", {"content": []}, "PRIVATE"),
            ("T", {"type": "doc"}, None),
            ("T", {"type": "doc"}, "public"),
        ],
    )
    def test_missing_or_invalid_fields(
        self, db_session, service, users, sample_document, title, content, visibility
    ):
        with pytest.raises(ValidationError):
            service.update_document(
                sample_document.id, users["alice"].id, title, content, visibility
            )
        assert VersionRepository(db_session).count() == 0

    def test_deeply_nested_content_rejected(self, db_session, service, users, sample_document):
        content = {"type": "text", "text": "leaf"}
        for _ in range(600):
            content = {"type": "blockquote", "content": [content]}

        with pytest.raises(ValidationError) as exc_info:
            service.update_document(
                sample_document.id, users["alice"].id, "Deep", content, "PRIVATE"
            )

        assert exc_info.value.field == "content"
        assert VersionRepository(db_session).count() == 0

    def test_versions_with_equal_timestamps_have_stable_order(
        self, db_session, users, sample_document
    ):
        stamp = utcnow()
        repo = VersionRepository(db_session)
        for version_id in ("v-b", "v-c", "v-a"):
            repo.append(
                DocumentVersion(
                    id=version_id,
                    document_id=sample_document.id,
                    content={"type": "doc"},
                    author_id=users["alice"].id,
                    created_at=stamp,
                )
            )
        db_session.commit()

        assert [v.id for v in repo.get_by_document_id(sample_document.id)] == ["v-c", "v-b", "v-a"]

    def test_failing_hook_does_not_fail_save(self, db_session, users, sample_document, build):
        calls = []

        def broken_hook(document, editor):
            calls.append(editor.id)
            raise RuntimeError("boom")

        service = DocumentService(db_session, post_update_hooks=[broken_hook])
        doc = service.update_document(
            sample_document.id, users["alice"].id, "Still saved", build.doc(), "PRIVATE"
        )

        assert calls == [users["alice"].id]
        assert doc.title == "Still saved"
        assert VersionRepository(db_session).count(sample_document.id) == 1

    def test_hooks_run_after_commit_in_order(self, db_session, users, sample_document, build):
        seen = []

        def first(document, editor):
            seen.append(("first", VersionRepository(db_session).count(document.id)))
            raise RuntimeError("ignored")

        def second(document, editor):
            seen.append(("second", document.title))

        service = DocumentService(db_session, post_update_hooks=[first, second])
        service.update_document(sample_document.id, users["alice"].id, "T2", build.doc(), "PRIVATE")

        assert seen == [("first", 1), ("second", "T2")]


class TestListDocuments:
    """Tests for dashboard listings."""

    @pytest.fixture
    def shared_setup(self, db_session, service, users):
        alice, bob = users["alice"], users["bob"]
        own = service.create_document(bob.id, "Bob's own")
        shared = service.create_document(alice.id, "Shared with Bob")
        service.create_document(alice.id, "Alice only")
        PermissionRepository(db_session).upsert(shared.id, bob.id, PermissionLevel.EDIT)
        db_session.commit()
        return own, shared

    def test_all_scope_annotates_roles(self, service, users, shared_setup):
        own, shared = shared_setup
        listings = service.list_documents(users["bob"].id)
        roles = {item.document.id: item.role for item in listings}
        assert roles == {own.id: Role.OWNER, shared.id: Role.EDITOR}

    def test_owned_and_shared_scopes(self, service, users, shared_setup):
        own, shared = shared_setup
        assert [i.document.id for i in service.list_documents(users["bob"].id, "owned")] == [own.id]
        assert [i.document.id for i in service.list_documents(users["bob"].id, "shared")] == [shared.id]

    def test_owned_ignores_self_permission_row(self, db_session, service, users, shared_setup):
        """A would-be self-grant never makes someone else's document 'owned'."""
        _, shared = shared_setup
        owned = service.list_documents(users["bob"].id, "owned")
        assert shared.id not in [i.document.id for i in owned]

    def test_recent_scope_excludes_stale(self, db_session, service, users, shared_setup):
        own, shared = shared_setup
        shared.updated_at = utcnow() - timedelta(days=45)
        db_session.commit()
        recent = service.list_documents(users["bob"].id, "recent")
        assert [i.document.id for i in recent] == [own.id]

    def test_archived_is_empty(self, service, users, shared_setup):
        assert service.list_documents(users["bob"].id, "archived") == []

    def test_unknown_scope(self, service, users):
        with pytest.raises(ValidationError) as exc_info:
            service.list_documents(users["bob"].id, "trash")
        assert exc_info.value.field == "scope"

    def test_newest_first(self, db_session, service, users, shared_setup):
        own, shared = shared_setup
        own.updated_at = utcnow() - timedelta(days=1)
        db_session.commit()
        ids = [i.document.id for i in service.list_documents(users["bob"].id)]
        assert ids == [shared.id, own.id]
