"""Validation result models."""

from dataclasses import dataclass
from enum import StrEnum


class IssueCode(StrEnum):
    """Codes identifying which constraint an issue violates."""

    INVALID_JSON = "invalid_json"
    INVALID_TYPE = "invalid_type"
    REQUIRED = "required"
    NOT_INTEGER = "not_integer"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    PATTERN_MISMATCH = "pattern_mismatch"


type PathSegment = str | int


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single violated constraint.

    Attributes:
        path: Location of the offending value, as object keys and array
            indices from the document root. Empty for document-level issues.
        code: The violated constraint.
        message: Human-readable description.
    """

    path: tuple[PathSegment, ...]
    code: IssueCode
    message: str

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON responses."""
        return {
            "path": list(self.path),
            "code": self.code.value,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of checking a value against a compiled schema.

    Attributes:
        issues: Every violated constraint, in document order.
    """

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        """True when no constraint was violated."""
        return not self.issues

    def __bool__(self) -> bool:
        return self.ok
