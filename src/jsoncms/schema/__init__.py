"""Schema validation for content documents.

Schemas are a JSON-Schema subset compiled into reusable validators and
bound to content files by naming convention
(``schema/{name}.schema.json`` validates ``{name}.json``).

Example:
    >>> from jsoncms.schema import SchemaRegistry, SchemaValidator
    >>> from jsoncms.utils import ContentRoot
    >>> validator = SchemaValidator(SchemaRegistry(ContentRoot("content")))
    >>> validator.validate("pages/home.json", '{"title": "Home"}')
    {'title': 'Home'}
"""

from jsoncms.schema._compiler import (
    AnyNode,
    ArrayNode,
    BooleanNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
    Validator,
    compile_schema,
)
from jsoncms.schema._models import (
    IssueCode,
    ValidationIssue,
    ValidationResult,
)
from jsoncms.schema._registry import SchemaRegistry
from jsoncms.schema._validate import SchemaValidator, parse_json

__all__ = [
    "AnyNode",
    "ArrayNode",
    "BooleanNode",
    "IssueCode",
    "NumberNode",
    "ObjectNode",
    "SchemaNode",
    "SchemaRegistry",
    "SchemaValidator",
    "StringNode",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
    "compile_schema",
    "parse_json",
]
