"""Custom exceptions for Doc-Share operations.

Every exception carries a stable ``kind``. Transports map the kind to a
status code; clients must not parse messages.
"""


class DocShareError(Exception):
    """Base exception for Doc-Share errors."""

    kind = "internal"


class UnauthenticatedError(DocShareError):
    """Raised when a request carries no verified identity."""

    kind = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(DocShareError):
    """Raised when the requester lacks the role an operation needs."""

    kind = "forbidden"


class ValidationError(DocShareError):
    """Raised when input validation fails."""

    kind = "invalid_argument"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DocShareError):
    """Raised when a resource is absent or not visible to the requester."""

    kind = "not_found"

    def __init__(self, resource_type: str, resource_id: str):
        message = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(message)
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateError(DocShareError):
    """Raised when attempting to create a duplicate resource."""

    kind = "invalid_argument"

    def __init__(self, resource_type: str, field: str, value: str):
        message = f"{resource_type} with {field} '{value}' already exists"
        super().__init__(message)
        self.resource_type = resource_type
        self.field = field
        self.value = value


class DatabaseError(DocShareError):
    """Raised when a database operation fails."""

    kind = "internal"

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
