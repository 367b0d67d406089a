"""Domain errors.

Why a single hierarchy:
- The CLI (or any other surface) catches one base class and prints one line
  that says which operation failed and why.
- Adapters translate `OSError`/Pydantic errors at the edge, so services only
  ever raise these.
"""

from __future__ import annotations


class FastlaneDeskError(Exception):
    """Base class for every error raised by the core operations."""

    default_operation = "operation"

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation or self.default_operation

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.message}"


class NotFoundError(FastlaneDeskError):
    """A path, project file, profile or scheme is absent."""


class SchemeNotFoundError(NotFoundError):
    def __init__(self, scheme: str, *, operation: str | None = None) -> None:
        super().__init__(f"scheme not found in project: {scheme}", operation=operation)
        self.scheme = scheme


class ParseError(FastlaneDeskError):
    """Tool output or a stored file is malformed beyond recovery."""


class ValidationError(FastlaneDeskError):
    """Configuration is missing required fields or holds invalid values."""


class FilesystemError(FastlaneDeskError):
    """A write or directory creation failed."""


class InvocationError(FastlaneDeskError):
    """A subprocess could not be started at all."""


class ToolchainError(FastlaneDeskError):
    """A subprocess started but exited badly or produced unusable output."""
