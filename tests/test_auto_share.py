"""Tests for mention-driven auto-sharing."""

import logging

import pytest

pytestmark = pytest.mark.unit

from docshare.config import Settings
from docshare.models.document import Document
from docshare.models.enums import PermissionLevel
from docshare.models.user import User
from docshare.services.document_service import DocumentService
from docshare.services.sharing import MentionAutoShare
from docshare.services.sharing.auto_share import mention_message
from docshare.storage.repositories import (
    NotificationRepository,
    PermissionRepository,
    VersionRepository,
)


def save(service, document, editor, content, title=None):
    return service.update_document(
        document.id, editor.id, title or document.title, content, "PRIVATE"
    )


@pytest.fixture
def service(db_session):
    """Document service with the default (preserve) policy."""
    return DocumentService(db_session, Settings(mention_grant_policy="preserve"))


class TestMentionGrants:
    """Tests for permissions created by mentions."""

    def test_mention_grants_view_and_notifies(self, db_session, service, users, sample_document, build):
        bob = users["bob"]
        save(service, sample_document, users["alice"], build.doc(build.paragraph(build.mention(bob.id))))

        permission = PermissionRepository(db_session).get(sample_document.id, bob.id)
        assert permission.level is PermissionLevel.VIEW

        notifications = NotificationRepository(db_session).list_for_user(bob.id)
        assert [n.message for n in notifications] == ['Alice mentioned you in "Sample Document"']

    def test_message_falls_back_to_email(self, users):
        assert mention_message(users["carol"], "Doc") == 'carol@example.com mentioned you in "Doc"'

    def test_preserve_keeps_existing_edit(self, db_session, service, users, sample_document, build):
        bob = users["bob"]
        PermissionRepository(db_session).upsert(sample_document.id, bob.id, PermissionLevel.EDIT)
        db_session.commit()

        save(service, sample_document, users["alice"], build.doc(build.paragraph(build.mention(bob.id))))

        permission = PermissionRepository(db_session).get(sample_document.id, bob.id, refresh=True)
        assert permission.level is PermissionLevel.EDIT
        assert PermissionRepository(db_session).count(sample_document.id) == 1

    def test_reset_to_view_downgrades_edit(self, db_session, users, sample_document, build):
        bob = users["bob"]
        PermissionRepository(db_session).upsert(sample_document.id, bob.id, PermissionLevel.EDIT)
        db_session.commit()

        service = DocumentService(db_session, Settings(mention_grant_policy="reset_to_view"))
        save(service, sample_document, users["alice"], build.doc(build.paragraph(build.mention(bob.id))))

        permission = PermissionRepository(db_session).get(sample_document.id, bob.id, refresh=True)
        assert permission.level is PermissionLevel.VIEW
        assert PermissionRepository(db_session).count(sample_document.id) == 1

    def test_owner_and_unknown_mentions_skipped(
        self, db_session, service, users, sample_document, build, caplog
    ):
        alice = users["alice"]
        content = build.doc(build.paragraph(build.mention(alice.id), build.mention("ghost")))

        with caplog.at_level(logging.WARNING, logger="docshare.services.sharing.auto_share"):
            save(service, sample_document, alice, content)

        assert PermissionRepository(db_session).count(sample_document.id) == 0
        assert NotificationRepository(db_session).count() == 0
        assert any("ghost" in record.getMessage() for record in caplog.records)

    def test_unknown_policy_rejected(self, db_session):
        with pytest.raises(ValueError):
            MentionAutoShare(db_session, policy="upgrade")


class TestNotificationDedupe:
    """Tests for notification de-duplication."""

    def test_resave_same_mentions_does_not_duplicate(self, db_session, service, users, sample_document, build):
        bob = users["bob"]
        content = build.doc(build.paragraph(build.mention(bob.id), build.mention(bob.id)))
        save(service, sample_document, users["alice"], content)
        save(service, sample_document, users["alice"], content)

        assert NotificationRepository(db_session).count(user_id=bob.id) == 1
        assert VersionRepository(db_session).count(sample_document.id) == 2

    def test_changed_title_creates_new_notification(
        self, db_session, service, users, sample_document, build
    ):
        bob = users["bob"]
        content = build.doc(build.paragraph(build.mention(bob.id)))
        save(service, sample_document, users["alice"], content)
        save(service, sample_document, users["alice"], content, title="Renamed")

        messages = {n.message for n in NotificationRepository(db_session).list_for_user(bob.id)}
        assert messages == {
            'Alice mentioned you in "Sample Document"',
            'Alice mentioned you in "Renamed"',
        }

    def test_overlapping_sessions_share_once(self, temp_db, db_session, users, sample_document, build):
        """Two sessions that both see no grant still leave a single row and notification."""
        bob = users["bob"]
        sample_document.content = build.doc(build.paragraph(build.mention(bob.id)))
        db_session.commit()

        first, second = temp_db.get_session(), temp_db.get_session()
        try:
            loaded = []
            for session in (first, second):
                assert PermissionRepository(session).get(sample_document.id, bob.id) is None
                loaded.append(
                    (session.get(Document, sample_document.id), session.get(User, users["alice"].id))
                )

            reports = [
                MentionAutoShare(session)(document, editor)
                for session, (document, editor) in zip((first, second), loaded)
            ]
        finally:
            first.close()
            second.close()

        assert [r.granted for r in reports] == [[bob.id], [bob.id]]
        assert PermissionRepository(db_session).count(sample_document.id) == 1
        assert NotificationRepository(db_session).count(user_id=bob.id) == 1


class TestFaultIsolation:
    """Failures for one mentioned user do not affect the save or other users."""

    def test_failure_for_one_user_is_isolated(
        self, db_session, users, sample_document, build, monkeypatch, caplog
    ):
        bob, carol = users["bob"], users["carol"]
        auto_share = MentionAutoShare(db_session)
        original_upsert = auto_share.permission_repo.upsert

        def flaky_upsert(document_id, user_id, level, overwrite=True):
            if user_id == bob.id:
                raise RuntimeError("store unavailable")
            return original_upsert(document_id, user_id, level, overwrite=overwrite)

        monkeypatch.setattr(auto_share.permission_repo, "upsert", flaky_upsert)
        service = DocumentService(db_session, post_update_hooks=[auto_share])

        content = build.doc(build.paragraph(build.mention(bob.id), build.mention(carol.id)))
        with caplog.at_level(logging.ERROR):
            doc = save(service, sample_document, users["alice"], content, title="Saved")

        assert doc.title == "Saved"
        assert VersionRepository(db_session).count(sample_document.id) == 1
        permissions = PermissionRepository(db_session)
        assert permissions.get(sample_document.id, bob.id) is None
        assert permissions.get(sample_document.id, carol.id).level is PermissionLevel.VIEW
        assert any(record.exc_info for record in caplog.records)

    def test_report(self, db_session, users, sample_document, build):
        bob = users["bob"]
        DocumentService(db_session, post_update_hooks=[]).update_document(
            sample_document.id,
            users["alice"].id,
            "Doc",
            build.doc(build.paragraph(build.mention(bob.id), build.mention(users["alice"].id))),
            "PRIVATE",
        )
        report = MentionAutoShare(db_session)(sample_document, users["alice"])

        assert report.mentioned == {bob.id, users["alice"].id}
        assert report.granted == [bob.id]
        assert report.skipped == [users["alice"].id]
        assert report.notified == 1
        assert report.failed == []
