"""Document validation logic."""

from typing import Any

from docshare.exceptions import ValidationError
from docshare.models.enums import Visibility
from docshare.services.content.tree import ContentNode


class DocumentValidator:
    """Validates document data according to business rules."""

    # Validation constants
    TITLE_MIN_LENGTH = 1
    TITLE_MAX_LENGTH = 500
    ID_MAX_LENGTH = 255

    @staticmethod
    def validate_id(document_id: str) -> None:
        """
        Validate document ID.

        Args:
            document_id: Document ID to validate

        Raises:
            ValidationError: If document_id is invalid
        """
        if not isinstance(document_id, str):
            raise ValidationError("Document ID must be a string", "id")
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID cannot be empty", "id")
        if len(document_id) > DocumentValidator.ID_MAX_LENGTH:
            raise ValidationError(
                f"Document ID must be at most {DocumentValidator.ID_MAX_LENGTH} characters", "id"
            )

    @staticmethod
    def validate_title(title: Any) -> None:
        """
        Validate document title.

        Raises:
            ValidationError: If title is missing, blank or too long
        """
        if title is None:
            raise ValidationError("Title is required", "title")
        if not isinstance(title, str):
            raise ValidationError("Title must be a string", "title")
        if not title.strip():
            raise ValidationError("Title is required and cannot be empty", "title")
        if len(title) > DocumentValidator.TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title must be at most {DocumentValidator.TITLE_MAX_LENGTH} characters", "title"
            )

    @staticmethod
    def validate_visibility(visibility: Any) -> Visibility:
        """
        Validate and normalize document visibility.

        Returns:
            Parsed visibility

        Raises:
            ValidationError: If visibility is missing or not PUBLIC/PRIVATE
        """
        if visibility is None:
            raise ValidationError("Visibility is required", "visibility")
        try:
            return Visibility(visibility)
        except ValueError:
            raise ValidationError(
                f"Visibility must be one of: {', '.join(v.value for v in Visibility)}",
                "visibility",
            ) from None

    @staticmethod
    def validate_content(content: Any) -> ContentNode:
        """
        Validate rich-text content and return its parsed tree.

        Raises:
            ValidationError: If content is missing or not a well-formed node tree
        """
        if content is None:
            raise ValidationError("Content is required", "content")
        return ContentNode.from_dict(content)
