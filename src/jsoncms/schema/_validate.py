# pyright: reportAny=false, reportExplicitAny=false
"""Validation of candidate content text before it reaches storage."""

from typing import Any

import orjson

from jsoncms.exceptions import InvalidJsonError, SchemaViolationError
from jsoncms.schema._models import IssueCode, ValidationIssue
from jsoncms.schema._registry import SchemaRegistry


def parse_json(text: str, *, path: str | None = None) -> Any:
    """Parse JSON text, reporting syntax errors as InvalidJsonError.

    Args:
        text: Candidate JSON text.
        path: Content path used for error context.

    Returns:
        The parsed value.

    Raises:
        InvalidJsonError: If the text is not valid JSON. The single issue
            carries the parser message and an empty location.

    Note:
        orjson also rejects two grammatically valid inputs: numbers that
        overflow a double, such as ``1e400``, and lone UTF-16 surrogate
        escapes such as ``"\\ud800"``. Both are reported as invalid JSON.
    """
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as e:
        issue = ValidationIssue(path=(), code=IssueCode.INVALID_JSON, message=str(e))
        msg = "Invalid JSON"
        raise InvalidJsonError(msg, path=path, issues=(issue,)) from e


class SchemaValidator:
    """Validates content text against the schema bound to its path.

    Example:
        >>> validator = SchemaValidator(SchemaRegistry(ContentRoot("content")))
        >>> validator.validate("pages/home.json", '{"title": "Home"}')
        {'title': 'Home'}
    """

    __slots__ = ("registry",)

    def __init__(self, registry: SchemaRegistry) -> None:
        self.registry = registry

    def validate(self, path: str, text: str) -> Any:
        """Validate candidate text for a content path.

        Syntax is checked first. A path without a schema accepts any
        syntactically valid JSON.

        Args:
            path: Normalized content path.
            text: Candidate JSON text.

        Returns:
            The parsed value.

        Raises:
            InvalidJsonError: If the text is not valid JSON.
            SchemaViolationError: If the value violates the schema; carries
                every issue found.
            SchemaLoadError: If the bound schema file is unusable.
        """
        value = parse_json(text, path=path)

        validator = self.registry.get(path)
        if validator is None:
            return value

        result = validator.check(value)
        if not result.ok:
            msg = "Schema validation failed"
            raise SchemaViolationError(msg, path=path, issues=result.issues)
        return value
