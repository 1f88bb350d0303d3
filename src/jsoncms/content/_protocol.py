"""Content backend protocol.

Both LocalBackend and RemoteBackend satisfy this protocol, so the content
store and tests can work against either (or against a fake).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from jsoncms.content._models import FileNode


@runtime_checkable
class ContentBackend(Protocol):
    """Protocol for a store of content files addressed by content path."""

    @property
    def name(self) -> str:
        """Short backend name used in logs and errors."""
        ...

    def read(self, path: str) -> str:
        """Return the text of a content file.

        Raises:
            ContentNotFoundError: If the backend does not hold the file.
        """
        ...

    def write(self, path: str, text: str) -> None:
        """Create or replace a content file."""
        ...

    def list_tree(self) -> tuple[FileNode, ...]:
        """Return the JSON file tree, directories first then files."""
        ...
