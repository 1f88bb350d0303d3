# ruff: noqa: TC003  # datetime needed at runtime for dataclass fields
"""Git operations manager models."""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, StrEnum
from typing import Any


class GitFileStatus(StrEnum):
    """Per-file version-control status."""

    UNMODIFIED = "unmodified"
    UNTRACKED = "untracked"
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    UNKNOWN = "unknown"


class HeadState(IntEnum):
    """File presence in the HEAD commit."""

    ABSENT = 0
    PRESENT = 1


class WorkdirState(IntEnum):
    """File state in the working tree, compared with HEAD."""

    ABSENT = 0
    IDENTICAL = 1
    DIFFERENT = 2


class StageState(IntEnum):
    """File state in the index, compared with HEAD and the working tree."""

    ABSENT = 0
    IDENTICAL = 1
    MATCHES_WORKDIR = 2
    DIFFERENT = 3


@dataclass(frozen=True, slots=True)
class StatusRow:
    """One row of the status matrix.

    Attributes:
        path: Content path relative to the content root.
        head: Presence in HEAD.
        workdir: Working tree state relative to HEAD.
        stage: Index state relative to HEAD and the working tree.
    """

    path: str
    head: HeadState
    workdir: WorkdirState
    stage: StageState

    @property
    def status(self) -> GitFileStatus:
        return classify(self.head, self.workdir, self.stage)

    def as_list(self) -> list[Any]:  # pyright: ignore[reportExplicitAny]
        """Return ``[path, head, workdir, stage]`` with integer states."""
        return [self.path, int(self.head), int(self.workdir), int(self.stage)]


_UNTRACKED = frozenset({(0, 2, 0)})
_ADDED = frozenset({(0, 2, 2), (0, 2, 3), (0, 0, 3)})
_UNMODIFIED = frozenset({(1, 1, 1)})
_MODIFIED = frozenset({(1, 2, 1), (1, 2, 2), (1, 2, 3), (1, 1, 3)})
_DELETED = frozenset({(1, 0, 1), (1, 0, 0), (1, 1, 0), (1, 2, 0), (1, 0, 3)})


def classify(head: int, workdir: int, stage: int) -> GitFileStatus:
    """Derive a file status from a status-matrix row.

    Args:
        head: 0 absent from HEAD, 1 present.
        workdir: 0 absent, 1 identical to HEAD, 2 different from HEAD.
        stage: 0 absent, 1 identical to HEAD, 2 identical to the working
            tree, 3 different from both.

    Returns:
        The GitFileStatus. Combinations outside the known table are UNKNOWN.

    Example:
        >>> classify(1, 2, 1)
        <GitFileStatus.MODIFIED: 'modified'>
    """
    key = (int(head), int(workdir), int(stage))
    if key in _UNTRACKED:
        return GitFileStatus.UNTRACKED
    if key in _ADDED:
        return GitFileStatus.ADDED
    if key in _UNMODIFIED:
        return GitFileStatus.UNMODIFIED
    if key in _MODIFIED:
        return GitFileStatus.MODIFIED
    if key in _DELETED:
        return GitFileStatus.DELETED
    return GitFileStatus.UNKNOWN


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """Information about a single commit.

    Attributes:
        sha: Full 40-character commit SHA hex string.
        message: Complete commit message.
        author_name: Author name from commit.
        author_email: Author email from commit.
        timestamp: Author timestamp with the author's timezone.
        parent_shas: Parent commit SHAs (empty for the initial commit).
    """

    sha: str
    message: str
    author_name: str
    author_email: str
    timestamp: datetime
    parent_shas: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Convert to a JSON-serializable dictionary."""
        return {
            "sha": self.sha,
            "message": self.message,
            "author": {
                "name": self.author_name,
                "email": self.author_email,
                "timestamp": int(self.timestamp.timestamp()),
            },
            "parents": list(self.parent_shas),
        }


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Result of a commit operation.

    Attributes:
        sha: Commit SHA hex string.
        paths: Content paths whose changes were committed.
    """

    sha: str
    paths: frozenset[str]
