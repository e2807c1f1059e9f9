"""Plain-text flattening, preview windows and query highlighting."""

import re

from docshare.services.content.tree import ContentNode

ELLIPSIS = "..."


def flatten_text(root: ContentNode) -> str:
    """
    Flatten a document to preview text.

    Only top-level paragraphs contribute: each becomes its children's text
    joined by single spaces. Other top-level nodes contribute an empty
    string, so they still add a separator.
    """
    return " ".join(
        " ".join(child.text or "" for child in node.content)
        if node.type == "paragraph" and node.content
        else ""
        for node in root.content
    )


def build_preview(
    text: str,
    query: str,
    context_chars: int = 75,
    fallback_chars: int = 150,
) -> str:
    """
    Cut a window of ``text`` around the first case-insensitive match of ``query``.

    Without a match the first ``fallback_chars`` characters are returned,
    followed by an ellipsis when the text was cut.
    """
    index = text.lower().find(query.lower())
    if index == -1:
        return text[:fallback_chars] + (ELLIPSIS if len(text) > fallback_chars else "")

    start = max(0, index - context_chars)
    end = min(len(text), index + len(query) + context_chars)
    preview = text[start:end]

    if start > 0:
        preview = ELLIPSIS + preview
    if end < len(text):
        preview = preview + ELLIPSIS
    return preview


def highlight(text: str, query: str, open_tag: str = "<mark>", close_tag: str = "</mark>") -> str:
    """Wrap every case-insensitive occurrence of ``query`` in highlight markers."""
    if not query.strip():
        return text

    pattern = re.compile(re.escape(query), re.IGNORECASE)
    return pattern.sub(lambda match: f"{open_tag}{match.group(0)}{close_tag}", text)
