"""Status matrix computation.

Compares, for every file under the content root, the blob recorded in HEAD,
the blob in the index and the hash of the working tree file.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Final

from dulwich.ignore import IgnoreFilterManager
from dulwich.object_store import iter_tree_contents
from dulwich.objects import Blob

from jsoncms.repository._models import HeadState, StageState, StatusRow, WorkdirState

if TYPE_CHECKING:
    from pathlib import Path

    from dulwich.repo import Repo

_GIT_DIR: Final = ".git"


def head_tree(repo: Repo) -> bytes | None:
    """Return the tree SHA of HEAD, or None for a repository with no commits."""
    try:
        head = repo.head()
    except KeyError:
        return None
    tree: bytes | None = getattr(repo[head], "tree", None)
    return tree


def head_blobs(repo: Repo, prefix: str) -> dict[str, bytes]:
    """Map repo-relative paths under ``prefix`` to their blob SHA in HEAD."""
    tree = head_tree(repo)
    if tree is None:
        return {}
    blobs: dict[str, bytes] = {}
    for entry in iter_tree_contents(repo.object_store, tree):
        path = entry.path.decode("utf-8")
        if _under(path, prefix):
            blobs[path] = entry.sha
    return blobs


def index_blobs(repo: Repo, prefix: str) -> dict[str, bytes | None]:
    """Map repo-relative paths under ``prefix`` to their blob SHA in the index.

    Conflicted entries map to None.
    """
    blobs: dict[str, bytes | None] = {}
    for raw_path, entry in repo.open_index().items():
        path = raw_path.decode("utf-8")
        if _under(path, prefix):
            blobs[path] = getattr(entry, "sha", None)
    return blobs


def workdir_blobs(repo: Repo, worktree: Path, content_dir: Path) -> dict[str, bytes]:
    """Hash every non-ignored file under ``content_dir``.

    Returns:
        Map of repo-relative path to the blob SHA the file would have.
    """
    ignore = IgnoreFilterManager.from_repo(repo)
    blobs: dict[str, bytes] = {}
    if not content_dir.is_dir():
        return blobs

    for dirpath, dirnames, filenames in os.walk(content_dir):
        dirnames[:] = sorted(d for d in dirnames if d != _GIT_DIR)
        for filename in filenames:
            full = os.path.join(dirpath, filename)  # noqa: PTH118
            rel = os.path.relpath(full, worktree).replace(os.sep, "/")
            if ignore.is_ignored(rel):
                continue
            if os.path.islink(full):  # noqa: PTH114
                data = os.readlink(full).encode("utf-8")  # noqa: PTH115
            else:
                with open(full, "rb") as f:  # noqa: PTH123
                    data = f.read()
            blobs[rel] = Blob.from_string(data).id
    return blobs


def _under(path: str, prefix: str) -> bool:
    return not prefix or path == prefix or path.startswith(f"{prefix}/")


def build_status_matrix(
    repo: Repo, worktree: Path, content_dir: Path
) -> list[StatusRow]:
    """Compute the status matrix for files under ``content_dir``.

    Args:
        repo: The open repository.
        worktree: Working tree root.
        content_dir: Directory to scope the matrix to, inside ``worktree``.

    Returns:
        Rows sorted by path, with paths relative to ``content_dir``.
    """
    prefix = content_dir.relative_to(worktree).as_posix()
    if prefix == ".":
        prefix = ""

    head = head_blobs(repo, prefix)
    index = index_blobs(repo, prefix)
    workdir = workdir_blobs(repo, worktree, content_dir)

    rows: list[StatusRow] = []
    for path in sorted(head.keys() | index.keys() | workdir.keys()):
        head_sha = head.get(path)
        work_sha = workdir.get(path)

        if work_sha is None:
            work_state = WorkdirState.ABSENT
        elif work_sha == head_sha:
            work_state = WorkdirState.IDENTICAL
        else:
            work_state = WorkdirState.DIFFERENT

        if path not in index:
            stage_state = StageState.ABSENT
        else:
            stage_sha = index[path]
            if stage_sha is not None and stage_sha == head_sha:
                stage_state = StageState.IDENTICAL
            elif stage_sha is not None and stage_sha == work_sha:
                stage_state = StageState.MATCHES_WORKDIR
            else:
                stage_state = StageState.DIFFERENT

        content_path = path[len(prefix) + 1 :] if prefix else path
        rows.append(
            StatusRow(
                path=content_path,
                head=HeadState.PRESENT if head_sha is not None else HeadState.ABSENT,
                workdir=work_state,
                stage=stage_state,
            )
        )
    return rows
