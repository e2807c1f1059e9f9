"""Rich-text content helpers: tree parsing, mention extraction, previews."""

from docshare.services.content.mentions import MENTION_NODE_TYPES, extract_mentioned_user_ids
from docshare.services.content.preview import build_preview, flatten_text, highlight
from docshare.services.content.tree import ContentNode

__all__ = [
    "ContentNode",
    "MENTION_NODE_TYPES",
    "extract_mentioned_user_ids",
    "flatten_text",
    "build_preview",
    "highlight",
]
