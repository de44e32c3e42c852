"""Error taxonomy shared by the downstream clients and the handler boundary."""
from __future__ import annotations

from typing import Optional


class NpmContextError(Exception):
    """Base class for failures that a handler turns into an error-flagged result."""


class UpstreamHTTPError(NpmContextError):
    """A downstream service answered with a non-2xx status."""

    def __init__(self, status: int, reason: str, url: str = ""):
        self.status = status
        self.reason = reason or "Unknown status"
        self.url = url
        super().__init__(self.reason)

    def __str__(self) -> str:
        return f"{self.reason} (HTTP {self.status})"


class SchemaValidationError(NpmContextError, ValueError):
    """Decoded JSON (or tool input) did not match its declared shape."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        self.message = message
        super().__init__(message)


class NetworkError(NpmContextError):
    """Transport-level failure reaching a downstream service."""


class ResourceNotFoundError(NpmContextError):
    """Every candidate location for a resource was exhausted."""
