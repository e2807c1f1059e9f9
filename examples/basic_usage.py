"""Basic usage example for Doc-Share services."""

from docshare.services import (
    DocumentService,
    PermissionService,
    SearchService,
    UserService,
    VersionService,
)
from docshare.services.notification_service import NotificationService
from docshare.storage import Database


def paragraph(*children):
    return {"type": "paragraph", "content": list(children)}


def main():
    """Demonstrate sharing, mentions, versions and search."""
    # Initialize database (uses SQLite by default)
    db = Database()
    db.create_tables()

    with db.session() as session:
        users = UserService(session)
        alice = users.register_user("alice@example.com", "Alice")
        bob = users.register_user("bob@example.com", "Bob")
        carol = users.register_user("carol@example.com", "Carol")
        print(f"Registered: {alice.email}, {bob.email}, {carol.email}")

        documents = DocumentService(session)
        doc = documents.create_document(alice.id, "Alpha Report")
        print(f"Created document: {doc.title} (ID: {doc.id})")

        # Share explicitly with Bob
        grant = PermissionService(session).grant_permission(doc.id, alice.id, bob.email, "EDIT")
        print(f"Granted {grant.permission.level.value} to {bob.email}")

        # Mentioning Carol shares the document with her and notifies her
        content = {
            "type": "doc",
            "content": [
                paragraph(
                    {"type": "text", "text": "Quarterly alpha numbers, reviewed by"},
                    {"type": "mention", "attrs": {"id": carol.id, "label": "Carol"}},
                )
            ],
        }
        documents.update_document(doc.id, alice.id, "Alpha Report", content, "PRIVATE")

        for permission in PermissionService(session).list_permissions(doc.id, alice.id):
            print(f"  {permission.user.email}: {permission.level.value}")

        for notification in NotificationService(session).list_notifications(carol.id):
            print(f"Carol was notified: {notification.message}")

        versions = VersionService(session).list_versions(doc.id, alice.id)
        print(f"Version snapshots: {len(versions)}")

        results = SearchService(session).search(carol.id, "alpha")
        for result in results.results:
            print(f"[{result.relevance_score}] {result.title_highlight}: {result.content_preview}")

    print("\nExample completed successfully!")


if __name__ == "__main__":
    main()
