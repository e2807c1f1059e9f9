"""Document service components."""

from docshare.services.document.validation import DocumentValidator

__all__ = ["DocumentValidator"]
