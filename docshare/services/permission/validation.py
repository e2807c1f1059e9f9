"""Permission validation logic."""

import re
from typing import Any

from docshare.exceptions import ValidationError
from docshare.models.enums import PermissionLevel


class PermissionValidator:
    """Validates permission grant and revoke input."""

    EMAIL_MAX_LENGTH = 320
    EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")

    @staticmethod
    def validate_level(level: Any) -> PermissionLevel:
        """
        Validate and normalize a permission level.

        Raises:
            ValidationError: If level is missing or not VIEW/EDIT
        """
        if level is None or level == "":
            raise ValidationError("Permission level is required", "level")
        try:
            return PermissionLevel(level)
        except ValueError:
            raise ValidationError("Invalid permission level", "level") from None

    @staticmethod
    def validate_email(email: Any) -> str:
        """
        Validate an email address and return it stripped.

        Raises:
            ValidationError: If email is missing or malformed
        """
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("Email is required", "email")
        email = email.strip()
        if len(email) > PermissionValidator.EMAIL_MAX_LENGTH:
            raise ValidationError(
                f"Email must be at most {PermissionValidator.EMAIL_MAX_LENGTH} characters", "email"
            )
        if not PermissionValidator.EMAIL_PATTERN.match(email):
            raise ValidationError("Email address is malformed", "email")
        return email

    @staticmethod
    def validate_user_id(user_id: Any) -> None:
        """
        Validate a target user ID.

        Raises:
            ValidationError: If user_id is missing
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("User ID is required", "user_id")
