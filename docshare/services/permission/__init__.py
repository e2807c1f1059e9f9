"""Permission service components."""

from docshare.services.permission.validation import PermissionValidator

__all__ = ["PermissionValidator"]
