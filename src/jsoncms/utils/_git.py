"""Common git utility functions.

Shared helpers for opening repositories and converting dulwich's byte-oriented
values.
"""

from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from jsoncms.exceptions import RepositoryNotInitializedError


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def open_repo(repo_path: Path) -> Repo:
    """Open the repository rooted at ``repo_path``.

    Args:
        repo_path: Path to the working tree root.

    Returns:
        The opened Repo instance.

    Raises:
        RepositoryNotInitializedError: If no Git repository exists there.
    """
    try:
        return Repo(str(repo_path))
    except NotGitRepository as e:
        msg = f"Not a Git repository: {repo_path}"
        raise RepositoryNotInitializedError(msg, path=repo_path) from e


def get_worktree_dir(repo: Repo) -> Path:
    """Get the worktree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Path to the worktree directory.
    """
    path = Path(decode_bytes(repo.path))
    if path.name == ".git":
        return path.parent
    return path
