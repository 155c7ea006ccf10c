"""
Custom exception classes for mcsi.

This module defines the exception hierarchy used throughout the application
for consistent error handling and reporting.
"""

from typing import Optional


class McsiError(Exception):
    """Base exception class for all mcsi errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ValidationError(McsiError):
    """Raised when input validation fails."""
    pass


class CatalogError(McsiError):
    """Raised when a catalog API call fails."""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code


class CatalogNotFoundError(CatalogError):
    """Raised when the catalog reports that a project or file does not exist."""
    pass


class DownloadError(McsiError):
    """Raised when file download fails."""
    pass


class ReleaseNotFound(McsiError):
    """Raised when no release matches the requested version."""
    pass


class NoClientManifest(McsiError):
    """Raised when a client pack has no manifest.json."""
    pass


class ManifestError(McsiError):
    """Raised when the install manifest cannot be read or written."""
    pass


class ManifestNotFound(ManifestError):
    """Raised when no install manifest exists."""
    pass


class VersionParseError(ValidationError):
    """Raised when a Minecraft version string is malformed."""
    pass


class LoaderParseError(ValidationError):
    """Raised when a mod loader id cannot be recognized."""
    pass


class InstallerProcessError(McsiError):
    """Raised when an external installer fails or cannot be started."""
    pass


class StagingIOError(McsiError):
    """Raised when filesystem operations on the staging or target tree fail."""
    pass
