"""Mention-driven auto-sharing.

After a document update commits, every user mentioned in the new content is
granted VIEW access and notified. Each mentioned user is processed in its own
transaction: one failure is logged and the rest continue. Delivery is
at-least-once; re-running over the same content is harmless because grants
are upserts and notifications are deduplicated.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from docshare.models.document import Document
from docshare.models.enums import PermissionLevel
from docshare.models.user import User
from docshare.services.content.mentions import extract_mentioned_user_ids
from docshare.services.content.tree import ContentNode
from docshare.storage.repositories import (
    NotificationRepository,
    PermissionRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

PRESERVE = "preserve"
RESET_TO_VIEW = "reset_to_view"


@dataclass
class AutoShareReport:
    """Outcome of one auto-share run."""

    mentioned: set[str] = field(default_factory=set)
    granted: list[str] = field(default_factory=list)
    notified: int = 0
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def mention_message(editor: User, title: str) -> str:
    return f'{editor.display_name} mentioned you in "{title}"'


class MentionAutoShare:
    """Post-update hook granting VIEW access to mentioned users."""

    def __init__(self, session: Session, policy: str = PRESERVE):
        """
        Args:
            session: SQLAlchemy database session
            policy: "preserve" leaves an existing grant untouched;
                    "reset_to_view" sets every mentioned user's grant to VIEW
        """
        if policy not in (PRESERVE, RESET_TO_VIEW):
            raise ValueError(f"Unknown mention grant policy: {policy}")
        self.session = session
        self.policy = policy
        self.user_repo = UserRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.notification_repo = NotificationRepository(session)

    def __call__(self, document: Document, editor: User) -> AutoShareReport:
        document_id = document.id
        owner_id = document.author_id
        message = mention_message(editor, document.title)

        report = AutoShareReport()
        report.mentioned = set(extract_mentioned_user_ids(ContentNode.from_dict(document.content)))
        if not report.mentioned:
            return report

        known_ids = self.user_repo.get_existing_ids(report.mentioned)

        for user_id in sorted(report.mentioned):
            if user_id == owner_id:
                logger.debug("Owner mentioned in own document %s", document_id)
                report.skipped.append(user_id)
                continue
            if user_id not in known_ids:
                logger.warning(
                    "Skipping mention of unknown user %s in document %s", user_id, document_id
                )
                report.skipped.append(user_id)
                continue

            try:
                self.permission_repo.upsert(
                    document_id,
                    user_id,
                    PermissionLevel.VIEW,
                    overwrite=self.policy == RESET_TO_VIEW,
                )
                inserted = self.notification_repo.insert_ignoring_duplicates(
                    [{"user_id": user_id, "document_id": document_id, "message": message}]
                )
                self.session.commit()
            except Exception:
                self.session.rollback()
                logger.exception(
                    "Auto-share failed for user %s on document %s", user_id, document_id
                )
                report.failed.append(user_id)
            else:
                report.granted.append(user_id)
                report.notified += inserted

        logger.info(
            "Auto-shared document %s with %d user(s), %d notification(s) created",
            document_id,
            len(report.granted),
            report.notified,
        )
        return report
