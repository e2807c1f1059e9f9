"""Mention extraction."""

from docshare.services.content.tree import ContentNode

# Built-in mention node plus the custom extension some editors register
MENTION_NODE_TYPES = frozenset({"mention", "customMention"})


def extract_mentioned_user_ids(root: ContentNode) -> frozenset[str]:
    """
    Collect the user IDs referenced by mention nodes anywhere in the tree.

    Every node's children are visited whatever its type, so mentions nested
    in lists, tables or quotes are found. The result is a set: repeated
    mentions collapse and traversal order does not matter.
    """
    return frozenset(
        str(node.attrs["id"])
        for node in root.walk()
        if node.type in MENTION_NODE_TYPES and node.attrs.get("id")
    )
