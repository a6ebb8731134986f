"""Custom exceptions for odtquill."""

from typing import Optional


class OdtQuillError(Exception):
    """Base exception for odtquill errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class TemplateLoadError(OdtQuillError):
    """Exception raised when a template archive or one of its parts cannot be loaded."""

    pass


class AssetError(OdtQuillError):
    """Exception raised when an image asset is missing or unreadable."""

    pass


class StyleError(OdtQuillError):
    """Exception raised for structural stylesheet problems and style conflicts."""

    pass


class PackagingError(OdtQuillError):
    """Exception raised while writing the output archive."""

    pass


class TemplateStateError(OdtQuillError):
    """Exception raised when a template is used after cleanup."""

    pass
