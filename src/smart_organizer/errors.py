"""Exception hierarchy shared by the organizer components."""

from __future__ import annotations

from typing import Any, Optional


class OrganizerError(Exception):
    """Base exception for organizer failures.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error identifier used in CLI/JSON payloads.
        details: Additional structured context.
    """

    code = "organizer_error"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable representation of the error."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class FilesystemError(OrganizerError):
    """Raised when the operating system rejects a scan or mutation."""

    code = "io_error"

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        merged = dict(details or {})
        if path:
            merged["path"] = path
        super().__init__(message, details=merged)


class InvalidRequestError(OrganizerError):
    """Raised for malformed caller input, always before any mutation happens."""

    code = "validation_error"


class PathViolationError(OrganizerError):
    """Raised when a path would escape the sandbox root."""

    code = "path_violation"

    def __init__(self, candidate: object, root: object) -> None:
        super().__init__(
            f"Path {candidate!s} escapes sandbox root {root!s}",
            details={"candidate": str(candidate), "root": str(root)},
        )


class AdvisorError(OrganizerError):
    """Raised when the external advisor fails or returns unusable output."""

    code = "advisor_error"


class OperationCancelled(OrganizerError):
    """Raised when a cancellation token fires during scanning or hashing."""

    code = "cancelled"


__all__ = [
    "OrganizerError",
    "FilesystemError",
    "InvalidRequestError",
    "PathViolationError",
    "AdvisorError",
    "OperationCancelled",
]
