from __future__ import annotations

from typing import Optional


class RepoManagerError(Exception):
    """Base error for the repository manager."""


class ValidationError(RepoManagerError):
    """Raised when user input is invalid (before any network call)."""


class NoRepositorySelectedError(ValidationError):
    """Raised when an operation needs an active repository and none is selected."""


class AccessDeniedError(RepoManagerError):
    """Raised when an operation tries to access data outside allowed scope."""


class UnauthorizedError(RepoManagerError):
    """Raised when GitHub rejects the token (HTTP 401)."""


class NotFoundError(RepoManagerError):
    """Raised when a requested resource is not found (HTTP 404)."""


class RemoteError(RepoManagerError):
    """Raised for any other failed GitHub call; carries the HTTP status if known."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class PartialRenameError(RemoteError):
    """Raised when a rename created the destination but could not delete the source."""

    def __init__(self, message: str, *, source: str, destination: str, status: Optional[int] = None) -> None:
        super().__init__(message, status)
        self.source = source
        self.destination = destination


class DecodeError(RepoManagerError):
    """Raised when a file payload is not valid base64 or UTF-8."""


class InvalidFormatError(RepoManagerError):
    """Raised when an import document is not a JSON array."""


class InvalidRecordError(RepoManagerError):
    """Raised when an import document holds an incomplete registration."""


class EmptyCollectionError(RepoManagerError):
    """Raised when exporting an empty registry."""
