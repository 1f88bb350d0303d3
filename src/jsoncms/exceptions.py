"""jsoncms exceptions.

Every exception carries an ``ErrorKind`` so callers (the HTTP boundary, the
CLI, the editor UI) can render a specific remediation without inspecting
exception types.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from jsoncms.schema._models import ValidationIssue


class ErrorKind(StrEnum):
    """Normalized error kinds shared by every layer."""

    INVALID_JSON = "invalid_json"
    SCHEMA_VIOLATION = "schema_violation"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    STORAGE_ERROR = "storage_error"
    AUTH_ERROR = "auth_error"
    CONFIG_ERROR = "config_error"
    CONFLICT_ERROR = "conflict_error"
    TRANSPORT_ERROR = "transport_error"
    EMPTY_MESSAGE = "empty_message"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    GIT_ERROR = "git_error"


class JsoncmsError(Exception):
    """Base exception for jsoncms errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.GIT_ERROR

    @property
    def message(self) -> str:
        """The human-readable message the exception was created with."""
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Validation Exceptions
# =============================================================================


class ContentValidationError(JsoncmsError, ValueError):
    """Base exception for content that must not reach storage.

    Attributes:
        path: The content path being validated, if known.
        issues: Every violated constraint, in document order.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        issues: Sequence[ValidationIssue] = (),
    ) -> None:
        """Initialize with error message and validation context.

        Args:
            message: Human-readable error message.
            path: The content path being validated.
            issues: The collected validation issues.
        """
        super().__init__(message)
        self.path: str | None = path
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)


class InvalidJsonError(ContentValidationError):
    """Raised when content text is not syntactically valid JSON."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_JSON


class SchemaViolationError(ContentValidationError):
    """Raised when parsed content violates its schema."""

    kind: ClassVar[ErrorKind] = ErrorKind.SCHEMA_VIOLATION


# =============================================================================
# Content Exceptions
# =============================================================================


class ContentError(JsoncmsError):
    """Base exception for content backend errors."""


class ContentNotFoundError(ContentError, LookupError):
    """Raised when a content file does not exist in a backend.

    Attributes:
        path: The normalized content path.
        source: Name of the backend that reported the miss.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    def __init__(
        self, message: str, *, path: str | None = None, source: str | None = None
    ) -> None:
        """Initialize with error message and lookup context."""
        super().__init__(message)
        self.path: str | None = path
        self.source: str | None = source


class AccessDeniedError(ContentError):
    """Raised when a content path escapes the content root.

    Always fatal for the operation and never retried.

    Attributes:
        path: The raw path as supplied by the caller.
        root: The content root the path was checked against.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.ACCESS_DENIED

    def __init__(self, message: str, *, path: str, root: Path | None = None) -> None:
        """Initialize with error message and path context."""
        super().__init__(message)
        self.path: str = path
        self.root: Path | None = root


class RemoteUnavailableError(ContentError):
    """Raised when the remote host answers with an unexpected status.

    Attributes:
        status_code: HTTP status code, or None for network failures.
        status_text: Reason phrase or transport error description.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.REMOTE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        status_text: str = "",
    ) -> None:
        """Initialize with error message and response context."""
        super().__init__(message)
        self.status_code: int | None = status_code
        self.status_text: str = status_text


class StorageError(ContentError):
    """Raised when the local content directory cannot be read or written.

    Attributes:
        path: The normalized content path.
        operation: The failed operation ("read", "write" or "list").
    """

    kind: ClassVar[ErrorKind] = ErrorKind.STORAGE_ERROR

    def __init__(self, message: str, *, path: str, operation: str) -> None:
        """Initialize with error message and operation context."""
        super().__init__(message)
        self.path: str = path
        self.operation: str = operation


# =============================================================================
# Authentication and Configuration Exceptions
# =============================================================================


class AuthError(JsoncmsError):
    """Raised when credentials are missing or rejected.

    Attributes:
        remediation: Instructions for configuring working credentials.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.AUTH_ERROR

    def __init__(self, message: str, *, remediation: str = "") -> None:
        """Initialize with error message and remediation text."""
        super().__init__(message)
        self.remediation: str = remediation


class ConfigError(JsoncmsError):
    """Base exception for configuration errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIG_ERROR


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source


class RemoteNotConfiguredError(ConfigError):
    """Raised when the remote repository owner, name or token is missing.

    Attributes:
        missing: Names of the missing settings.
    """

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        """Initialize with error message and the missing setting names."""
        super().__init__(message)
        self.missing: tuple[str, ...] = tuple(missing)


class IdentityNotConfiguredError(ConfigError):
    """Raised when no commit author identity can be resolved."""


class SchemaLoadError(ConfigError):
    """Raised when a schema file exists but cannot be compiled.

    Attributes:
        schema_path: Path to the offending schema file.
    """

    def __init__(self, message: str, *, schema_path: Path) -> None:
        """Initialize with error message and schema location."""
        super().__init__(message)
        self.schema_path: Path = schema_path


# =============================================================================
# Git Exceptions
# =============================================================================


class GitError(JsoncmsError):
    """Base exception for Git operation failures.

    Attributes:
        details: Underlying error message preserved for diagnostics.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.GIT_ERROR

    def __init__(self, message: str, *, details: str | None = None) -> None:
        """Initialize with error message and diagnostic details."""
        super().__init__(message)
        self.details: str | None = details


class ConflictError(GitError):
    """Raised when a checkout or pull conflicts with local state."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFLICT_ERROR


class TransportError(GitError):
    """Raised when a push or pull fails for a non-authorization reason."""

    kind: ClassVar[ErrorKind] = ErrorKind.TRANSPORT_ERROR


class EmptyMessageError(GitError, ValueError):
    """Raised when a commit message is blank."""

    kind: ClassVar[ErrorKind] = ErrorKind.EMPTY_MESSAGE


class NothingToCommitError(GitError):
    """Raised when a commit is requested but the content root is clean."""

    kind: ClassVar[ErrorKind] = ErrorKind.NOTHING_TO_COMMIT


class RepositoryNotInitializedError(GitError):
    """Raised when the configured directory is not a Git repository.

    Attributes:
        path: The directory that was searched.
    """

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialize with error message and path context."""
        super().__init__(message)
        self.path: Path = path
