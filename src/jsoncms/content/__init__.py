"""Content backends and the content store.

The store reads local-first with remote fallback and validates every write
before it reaches a backend.

Example:
    >>> from jsoncms.content import ContentStore, LocalBackend
    >>> from jsoncms.schema import SchemaRegistry, SchemaValidator
    >>> from jsoncms.utils import ContentRoot
    >>> root = ContentRoot("content")
    >>> store = ContentStore(
    ...     LocalBackend(root), SchemaValidator(SchemaRegistry(root))
    ... )
    >>> store.write("pages/home.json", '{"title": "Home"}').path
    'pages/home.json'
"""

from jsoncms.content._local import LocalBackend
from jsoncms.content._models import (
    Failed,
    FileNode,
    Found,
    Missing,
    NodeType,
    ReadOutcome,
    WriteResult,
)
from jsoncms.content._protocol import ContentBackend
from jsoncms.content._remote import DEFAULT_API_URL, RemoteBackend
from jsoncms.content._store import ContentStore, attempt_read

__all__ = [
    "DEFAULT_API_URL",
    "ContentBackend",
    "ContentStore",
    "Failed",
    "FileNode",
    "Found",
    "LocalBackend",
    "Missing",
    "NodeType",
    "ReadOutcome",
    "RemoteBackend",
    "WriteResult",
    "attempt_read",
]
