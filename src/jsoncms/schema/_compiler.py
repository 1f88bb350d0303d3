# pyright: reportAny=false, reportExplicitAny=false
"""Compilation of JSON-Schema documents into reusable validators.

A schema document is compiled once into a tree of nodes, one node class per
supported ``type``. Each node checks a parsed JSON value and appends an issue
for every violated constraint, so a single pass reports all problems.

Supported keywords: ``type``, ``properties``, ``required``, ``items``,
``minLength``/``maxLength``, ``minimum``/``maximum``, ``pattern`` and
``minItems``/``maxItems``. Anything else is ignored. Objects are open:
properties the schema does not declare are always accepted.

Example:
    >>> validator = compile_schema(
    ...     {"type": "object", "required": ["title"],
    ...      "properties": {"title": {"type": "string", "minLength": 1}}}
    ... )
    >>> validator.check({"title": ""}).ok
    False
"""

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from jsoncms.schema._models import (
    IssueCode,
    PathSegment,
    ValidationIssue,
    ValidationResult,
)

type Location = tuple[PathSegment, ...]


class SchemaNode(Protocol):
    """A compiled schema node."""

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        """Append an issue to ``issues`` for every constraint ``value`` violates."""
        ...


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _type_issue(expected: str, value: Any, path: Location) -> ValidationIssue:
    return ValidationIssue(
        path=path,
        code=IssueCode.INVALID_TYPE,
        message=f"Expected {expected}, received {_json_type_name(value)}",
    )


@dataclass(frozen=True, slots=True)
class AnyNode:
    """Accepts every value. Used for absent or unknown ``type``."""

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        return


@dataclass(frozen=True, slots=True)
class BooleanNode:
    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        if not isinstance(value, bool):
            issues.append(_type_issue("boolean", value, path))


@dataclass(frozen=True, slots=True)
class StringNode:
    """String with optional length bounds and a search pattern."""

    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        if not isinstance(value, str):
            issues.append(_type_issue("string", value, path))
            return

        if self.min_length is not None and len(value) < self.min_length:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_SMALL,
                    message=(
                        f"String must contain at least {self.min_length} character(s)"
                    ),
                )
            )
        if self.max_length is not None and len(value) > self.max_length:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_BIG,
                    message=(
                        f"String must contain at most {self.max_length} character(s)"
                    ),
                )
            )
        if self.pattern is not None and self.pattern.search(value) is None:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.PATTERN_MISMATCH,
                    message=f"String does not match pattern {self.pattern.pattern!r}",
                )
            )


@dataclass(frozen=True, slots=True)
class NumberNode:
    """Number or integer with optional inclusive bounds.

    Integral floats such as ``2.0`` satisfy ``integer``. Booleans are never
    numbers even though Python treats them as ints.
    """

    integer: bool = False
    minimum: float | None = None
    maximum: float | None = None

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            issues.append(
                _type_issue("integer" if self.integer else "number", value, path)
            )
            return

        if self.integer and isinstance(value, float) and not value.is_integer():
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.NOT_INTEGER,
                    message="Expected integer, received float",
                )
            )
        if self.minimum is not None and value < self.minimum:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_SMALL,
                    message=f"Number must be greater than or equal to {self.minimum}",
                )
            )
        if self.maximum is not None and value > self.maximum:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_BIG,
                    message=f"Number must be less than or equal to {self.maximum}",
                )
            )


@dataclass(frozen=True, slots=True)
class ArrayNode:
    items: SchemaNode = field(default_factory=AnyNode)
    min_items: int | None = None
    max_items: int | None = None

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        if not isinstance(value, list):
            issues.append(_type_issue("array", value, path))
            return

        if self.min_items is not None and len(value) < self.min_items:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_SMALL,
                    message=f"Array must contain at least {self.min_items} element(s)",
                )
            )
        if self.max_items is not None and len(value) > self.max_items:
            issues.append(
                ValidationIssue(
                    path=path,
                    code=IssueCode.TOO_BIG,
                    message=f"Array must contain at most {self.max_items} element(s)",
                )
            )
        for index, item in enumerate(value):
            self.items.collect(item, (*path, index), issues)


@dataclass(frozen=True, slots=True)
class ObjectNode:
    """Open object: only declared properties are constrained.

    Attributes:
        properties: Declared property validators, in declaration order.
        required: Keys that must be present.
    """

    properties: tuple[tuple[str, SchemaNode], ...] = ()
    required: tuple[str, ...] = ()

    def collect(
        self, value: Any, path: Location, issues: list[ValidationIssue]
    ) -> None:
        if not isinstance(value, dict):
            issues.append(_type_issue("object", value, path))
            return

        declared = {name for name, _ in self.properties}
        for name, node in self.properties:
            if name not in value:
                if name in self.required:
                    issues.append(_required_issue(name, path))
                continue
            node.collect(value[name], (*path, name), issues)

        # Required keys without a property schema still have to be present
        for name in self.required:
            if name not in declared and name not in value:
                issues.append(_required_issue(name, path))


def _required_issue(name: str, path: Location) -> ValidationIssue:
    return ValidationIssue(
        path=(*path, name), code=IssueCode.REQUIRED, message="Required"
    )


@dataclass(frozen=True, slots=True)
class Validator:
    """A compiled schema, reusable across any number of checks."""

    root: SchemaNode

    def check(self, value: Any) -> ValidationResult:
        """Check a parsed JSON value.

        Args:
            value: The parsed document.

        Returns:
            ValidationResult listing every violated constraint.
        """
        issues: list[ValidationIssue] = []
        self.root.collect(value, (), issues)
        return ValidationResult(issues=tuple(issues))


def _bound(schema: dict[str, Any], key: str) -> Any:
    value = schema.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


def _compile_node(schema: Any) -> SchemaNode:  # noqa: PLR0911
    if not isinstance(schema, dict):
        return AnyNode()

    match schema.get("type"):
        case "string":
            pattern: re.Pattern[str] | None = None
            source = schema.get("pattern")
            if isinstance(source, str) and source:
                try:
                    pattern = re.compile(source)
                except re.error as e:
                    msg = f"Invalid pattern {source!r}: {e}"
                    raise ValueError(msg) from e
            return StringNode(
                min_length=_bound(schema, "minLength"),
                max_length=_bound(schema, "maxLength"),
                pattern=pattern,
            )
        case "number" | "integer" as type_name:
            return NumberNode(
                integer=type_name == "integer",
                minimum=_bound(schema, "minimum"),
                maximum=_bound(schema, "maximum"),
            )
        case "boolean":
            return BooleanNode()
        case "array":
            return ArrayNode(
                items=_compile_node(schema.get("items")),
                min_items=_bound(schema, "minItems"),
                max_items=_bound(schema, "maxItems"),
            )
        case "object":
            raw_properties = schema.get("properties")
            properties = (
                tuple(
                    (str(name), _compile_node(sub))
                    for name, sub in raw_properties.items()
                )
                if isinstance(raw_properties, dict)
                else ()
            )
            raw_required = schema.get("required")
            required = (
                tuple(str(name) for name in raw_required)
                if isinstance(raw_required, list)
                else ()
            )
            return ObjectNode(properties=properties, required=required)
        case _:
            return AnyNode()


def compile_schema(schema: Any) -> Validator:
    """Compile a schema document into a Validator.

    Args:
        schema: Parsed schema document. Non-mapping values and mappings with
            an absent or unknown ``type`` compile to an accept-anything
            validator.

    Returns:
        The compiled Validator.

    Raises:
        ValueError: If a ``pattern`` is not a valid regular expression.
    """
    return Validator(root=_compile_node(schema))
