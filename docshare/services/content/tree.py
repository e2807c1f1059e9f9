"""Typed view over the editor's JSON document tree."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional

from docshare.exceptions import ValidationError

MAX_DEPTH = 100


@dataclass(frozen=True)
class ContentNode:
    """One node of a rich-text tree: a type tag, attributes and ordered children."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    content: tuple["ContentNode", ...] = ()
    text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, path: str = "content", depth: int = 1) -> "ContentNode":
        """
        Build a node tree from the editor's JSON representation.

        Args:
            data: Mapping with a string ``type`` and optional ``attrs``,
                  ``content`` (list of child mappings) and ``text``
            path: Location used in error messages
            depth: Nesting level of ``data``; the root is 1

        Returns:
            Root node

        Raises:
            ValidationError: If any node is malformed or nested deeper than MAX_DEPTH
        """
        if depth > MAX_DEPTH:
            raise ValidationError(
                f"Content is nested more than {MAX_DEPTH} levels deep", "content"
            )
        if not isinstance(data, Mapping):
            raise ValidationError(f"{path} must be an object", "content")

        node_type = data.get("type")
        if not isinstance(node_type, str) or not node_type:
            raise ValidationError(f"{path}.type must be a non-empty string", "content")

        attrs = data.get("attrs") or {}
        if not isinstance(attrs, Mapping):
            raise ValidationError(f"{path}.attrs must be an object", "content")

        children = data.get("content") or []
        if not isinstance(children, list):
            raise ValidationError(f"{path}.content must be a list", "content")

        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise ValidationError(f"{path}.text must be a string", "content")

        return cls(
            type=node_type,
            attrs=dict(attrs),
            content=tuple(
                cls.from_dict(child, f"{path}.content[{index}]", depth + 1)
                for index, child in enumerate(children)
            ),
            text=text,
        )

    def walk(self) -> Iterator["ContentNode"]:
        """Yield this node and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.content))
