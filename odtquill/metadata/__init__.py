"""Document metadata access."""

from .metadata import META_FIELDS, DocumentMetadata

__all__ = ["META_FIELDS", "DocumentMetadata"]
