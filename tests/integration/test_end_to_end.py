"""End-to-end integration tests for Doc-Share workflows."""

import pytest

pytestmark = pytest.mark.integration

from docshare.exceptions import NotFoundError
from docshare.models.enums import PermissionLevel
from docshare.services.access_service import Role
from docshare.services.document_service import DocumentService
from docshare.services.notification_service import NotificationService
from docshare.services.permission_service import PermissionService
from docshare.services.search_service import SearchService
from docshare.services.user_service import UserService
from docshare.services.version_service import VersionService
from tests.conftest import ContentBuilder as B


class TestCollaborationWorkflow:
    """Test sharing, mentions, history and search across separate sessions."""

    def test_mention_share_search_and_revoke(self, temp_db):
        """Each step runs in its own session, the way requests do."""
        with temp_db.session() as session:
            users = UserService(session)
            alice = users.register_user("alice@example.com", "Alice").id
            bob = users.register_user("bob@example.com", "Bob").id
            carol = users.register_user("carol@example.com", "Carol").id
            doc_id = DocumentService(session).create_document(alice, "Alpha Plan").id

        with temp_db.session() as session:
            PermissionService(session).grant_permission(doc_id, alice, "bob@example.com", "EDIT")

        content = B.doc(
            B.paragraph("Kickoff for the alpha rollout, cc", B.mention(bob), B.mention(carol)),
            {"type": "bulletList", "content": [
                {"type": "listItem", "content": [B.paragraph(B.mention(carol))]},
            ]},
        )
        with temp_db.session() as session:
            DocumentService(session).update_document(doc_id, alice, "Alpha Plan", content, "PRIVATE")

        with temp_db.session() as session:
            permissions = {
                p.user_id: p.level for p in PermissionService(session).list_permissions(doc_id, carol)
            }
            # bob keeps EDIT; carol gains VIEW from the mention
            assert permissions == {bob: PermissionLevel.EDIT, carol: PermissionLevel.VIEW}

            inbox = NotificationService(session).list_notifications(carol)
            assert [n.message for n in inbox] == ['Alice mentioned you in "Alpha Plan"']

            access = DocumentService(session).get_document(doc_id, carol)
            assert access.role is Role.VIEWER

            results = SearchService(session).search(carol, "alpha")
            assert results.total == 1
            assert results.results[0].permission == "VIEW"
            assert "<mark>alpha</mark>" in results.results[0].content_preview

        with temp_db.session() as session:
            PermissionService(session).revoke_permission(doc_id, alice, carol)

        with temp_db.session() as session:
            with pytest.raises(NotFoundError):
                VersionService(session).list_versions(doc_id, carol)
            assert SearchService(session).search(carol, "alpha").total == 0
            assert len(VersionService(session).list_versions(doc_id, alice)) == 1
