"""Data models for content backends and the content store."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from jsoncms.exceptions import ContentNotFoundError, JsoncmsError


class NodeType(StrEnum):
    """Kind of entry in a content tree."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True, slots=True)
class FileNode:
    """One entry of the content tree listing.

    Attributes:
        name: Final path segment.
        path: Content path relative to the content root.
        type: Whether the entry is a file or a directory.
        children: Child entries, directories first then files, each group
            sorted by name. Always empty for files.
    """

    name: str
    path: str
    type: NodeType
    children: "tuple[FileNode, ...]" = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "type": self.type.value,
        }
        if self.type is NodeType.DIRECTORY:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def sort_nodes(nodes: list[FileNode]) -> tuple[FileNode, ...]:
    """Order tree entries: directories first, then files, each by name."""
    return tuple(
        sorted(nodes, key=lambda n: (n.type is not NodeType.DIRECTORY, n.name))
    )


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of a content store write.

    Attributes:
        path: Normalized content path that was written.
        content: The text that was persisted.
        remote_synced: True when the remote copy was updated as well. False
            when no remote is configured or the remote write failed.
    """

    path: str
    content: str
    remote_synced: bool = False


# =============================================================================
# Read Outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Found:
    """A backend returned the file's text."""

    text: str
    source: str


@dataclass(frozen=True, slots=True)
class Missing:
    """A backend does not hold the file."""

    error: ContentNotFoundError


@dataclass(frozen=True, slots=True)
class Failed:
    """A backend could not answer."""

    error: JsoncmsError


type ReadOutcome = Found | Missing | Failed
