"""Side effects that run after a document update has been committed."""

from docshare.services.sharing.auto_share import AutoShareReport, MentionAutoShare

__all__ = ["MentionAutoShare", "AutoShareReport"]
