"""Exception hierarchy shared by the content, rendering, and build layers."""

from __future__ import annotations


class PortalError(Exception):
    """Base class for every error raised by docs_portal."""


class ContentAccessError(PortalError):
    """Raised when a content path cannot be listed or read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot access content path '{path or '.'}': {reason}")
        self.path = path
        self.reason = reason


class PathResolutionError(PortalError, ValueError):
    """Raised when a content path is empty or escapes the content root."""


class BuildSetupError(PortalError):
    """Raised when the output root cannot be established for a static build."""


class BuildAborted(PortalError):
    """Raised when a caller cancels a build between two phases."""


__all__ = [
    "BuildAborted",
    "BuildSetupError",
    "ContentAccessError",
    "PathResolutionError",
    "PortalError",
]
