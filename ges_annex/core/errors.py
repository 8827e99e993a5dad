"""Exception taxonomy shared by the portal services."""

from __future__ import annotations


class GesAnnexError(Exception):
    """Base class for errors surfaced to users as a plain message."""


class Unauthenticated(GesAnnexError):
    """Raised when an operation needs a signed-in subject and there is none."""

    def __init__(self, message: str = "Please sign in to continue.") -> None:
        super().__init__(message)


class PermissionDenied(GesAnnexError):
    """Raised when the signed-in subject lacks the role an operation requires."""


class ValidationError(GesAnnexError):
    """Raised when a quiz draft or account form is malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(GesAnnexError):
    """Raised by a content store when a read or write fails."""
