# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Git operations manager for the content working tree.

Wraps a dulwich repository and scopes every operation to the content root:
status, commit, push, pull, per-file history and per-file revert. Raw dulwich
errors are mapped onto the jsoncms error taxonomy.
"""

from __future__ import annotations

import io
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Self, cast

from dulwich import porcelain
from dulwich.client import HTTPUnauthorized
from dulwich.errors import GitProtocolError, NotGitRepository
from dulwich.index import build_file_from_blob, index_entry_from_stat
from dulwich.object_store import tree_lookup_path
from dulwich.objects import Blob
from dulwich.objectspec import parse_commit

from jsoncms.exceptions import (
    AuthError,
    ConfigError,
    ConflictError,
    ContentNotFoundError,
    EmptyMessageError,
    GitError,
    NothingToCommitError,
    TransportError,
)
from jsoncms.repository._credentials import (
    AUTH_REMEDIATION,
    DEFAULT_USERNAME,
    requires_credentials,
    resolve_credentials,
    transport_kind,
)
from jsoncms.repository._identity import resolve_identity
from jsoncms.repository._models import (
    CommitRecord,
    CommitResult,
    GitFileStatus,
    StageState,
    StatusRow,
    WorkdirState,
)
from jsoncms.repository._status import build_status_matrix, head_blobs, index_blobs
from jsoncms.utils._git import decode_bytes, get_worktree_dir, open_repo
from jsoncms.utils._locks import ReadWriteLock
from jsoncms.utils._logging import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from types import TracebackType

    from structlog.typing import FilteringBoundLogger

    from jsoncms.config import Settings
    from jsoncms.utils._paths import ContentRoot

DEFAULT_REMOTE: Final = "origin"
DEFAULT_BRANCH: Final = "main"


class ContentRepository:
    """Git operations scoped to the content root.

    Paths accepted and returned are content paths (relative to the content
    root). ``commit``, ``push``, ``pull`` and ``revert`` hold the
    repository's write lock; ``status``, ``history`` and ``current_branch``
    share the read lock.

    The class implements the context manager protocol; the underlying
    dulwich Repo is closed on exit.

    Attributes:
        content_root: The content root operations are scoped to.

    Example:
        >>> with ContentRepository(Path("/srv/site"), ContentRoot("content")) as repo:
        ...     repo.status()
        {'pages/home.json': <GitFileStatus.MODIFIED: 'modified'>}
    """

    __slots__: Final = (
        "_author_email",
        "_author_name",
        "_environ",
        "_home",
        "_lock",
        "_logger",
        "_repo",
        "_root",
        "_token",
        "_use_fallback_identity",
        "_username",
        "content_root",
    )

    def __init__(
        self,
        repo_path: Path,
        content_root: ContentRoot,
        *,
        author_name: str = "",
        author_email: str = "",
        use_fallback_identity: bool = True,
        token: str = "",
        username: str = DEFAULT_USERNAME,
        logger: FilteringBoundLogger | None = None,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
    ) -> None:
        """Open the repository.

        Args:
            repo_path: Working tree root.
            content_root: Content root; must lie inside the working tree.
            author_name: Explicit commit author name.
            author_email: Explicit commit author email.
            use_fallback_identity: Whether to commit as the built-in fallback
                identity when none is configured.
            token: Configured token for HTTP(S) remotes.
            username: Username sent with ``token``.
            logger: Logger for operation events.
            environ: Environment to read credentials from instead of
                ``os.environ``.
            home: Home directory for credential lookup instead of the user's.

        Raises:
            RepositoryNotInitializedError: If ``repo_path`` is not a Git
                repository.
            ConfigError: If the content root is outside the working tree.
        """
        self._repo = open_repo(repo_path)
        self._root = get_worktree_dir(self._repo).resolve()
        if not content_root.path.is_relative_to(self._root):
            self._repo.close()
            msg = f"Content root {content_root.path} is outside repository {self._root}"
            raise ConfigError(msg)

        self.content_root = content_root
        self._author_name = author_name
        self._author_email = author_email
        self._use_fallback_identity = use_fallback_identity
        self._token = token
        self._username = username
        self._environ = environ
        self._home = home
        self._lock = ReadWriteLock()
        self._logger = logger if logger is not None else create_null_logger()

    @classmethod
    def from_settings(
        cls, settings: Settings, *, logger: FilteringBoundLogger | None = None
    ) -> Self:
        """Open the repository described by the ``[git]`` settings."""
        git = settings.git
        return cls(
            settings.repo_path(),
            settings.content_root(),
            author_name=git.author_name,
            author_email=git.author_email,
            use_fallback_identity=git.use_fallback_identity,
            token=git.token,
            username=git.username,
            logger=logger,
        )

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying git repository."""
        self._repo.close()

    @property
    def root(self) -> Path:
        """The resolved working tree root."""
        return self._root

    # =========================================================================
    # Status Methods
    # =========================================================================

    def status_matrix(self) -> list[StatusRow]:
        """Return a status row for every file under the content root.

        A file appears when it is present in HEAD, in the index, or in the
        working tree and not ignored.

        Returns:
            Rows sorted by content path.
        """
        with self._lock.read():
            return self._status_matrix()

    def status(self) -> dict[str, GitFileStatus]:
        """Return the classified status of every file under the content root.

        Example:
            >>> repo.status()["pages/home.json"]
            <GitFileStatus.UNTRACKED: 'untracked'>
        """
        return {row.path: row.status for row in self.status_matrix()}

    def _status_matrix(self) -> list[StatusRow]:
        return build_status_matrix(self._repo, self._root, self.content_root.path)

    def current_branch(self) -> str:
        """Return the checked-out branch name, or ``HEAD`` when detached."""
        with self._lock.read():
            refnames, _ = self._repo.refs.follow(b"HEAD")
        name = decode_bytes(refnames[-1])
        return name.removeprefix("refs/heads/")

    def head_sha(self) -> str | None:
        """Return the HEAD commit SHA, or None for a repository with no commits."""
        with self._lock.read():
            return self._head_sha()

    def _head_sha(self) -> str | None:
        try:
            return decode_bytes(self._repo.head())
        except KeyError:
            return None

    # =========================================================================
    # Commit Methods
    # =========================================================================

    def commit(self, message: str) -> CommitResult:
        """Stage every change under the content root and commit it.

        Additions, modifications and deletions are all staged. The author is
        resolved through the identity chain.

        The whole index is committed, so changes already staged outside the
        content root are committed too. They are logged as a warning but are
        not listed in the result.

        Args:
            message: Commit message.

        Returns:
            CommitResult with the new commit SHA and the committed paths.

        Raises:
            EmptyMessageError: If the message is blank.
            NothingToCommitError: If nothing under the content root changed.
            IdentityNotConfiguredError: If no author identity is available.
            GitError: If dulwich fails to stage the changes or write the commit.
        """
        if not message.strip():
            msg = "Commit message must not be empty"
            raise EmptyMessageError(msg)

        with self._lock.write():
            identity = resolve_identity(
                self._repo,
                name=self._author_name,
                email=self._author_email,
                use_fallback=self._use_fallback_identity,
            )

            try:
                self._stage_content()
            except (OSError, porcelain.Error) as e:
                msg = "Failed to stage changes"
                raise GitError(msg, details=str(e)) from e

            changed = self._staged_paths()
            if not changed:
                msg = "Nothing to commit"
                raise NothingToCommitError(msg)

            outside = self._staged_outside_root()
            if outside:
                self._logger.warning("commit_includes_outside_paths", paths=outside)

            author = identity.format()
            try:
                sha_bytes: bytes = porcelain.commit(
                    self._repo,
                    message=message.encode("utf-8"),
                    author=author,
                    committer=author,
                )
            except (OSError, porcelain.Error) as e:
                msg = "Failed to commit changes"
                raise GitError(msg, details=str(e)) from e

        sha = decode_bytes(sha_bytes)
        self._logger.info(
            "commit_created",
            sha=sha,
            files=len(changed),
            identity_source=identity.source,
        )
        return CommitResult(sha=sha, paths=frozenset(changed))

    def _stage_content(self) -> None:
        """Bring the index in line with the working tree under the content root."""
        to_add: list[str] = []
        to_remove: list[bytes] = []
        for row in self._status_matrix():
            repo_rel = self._repo_relative(row.path)
            if row.workdir is WorkdirState.ABSENT:
                if row.stage is not StageState.ABSENT:
                    to_remove.append(repo_rel.encode("utf-8"))
            elif row.stage is StageState.MATCHES_WORKDIR:
                continue
            elif not (
                row.workdir is WorkdirState.IDENTICAL
                and row.stage is StageState.IDENTICAL
            ):
                to_add.append(str(self._root / repo_rel))

        if to_add:
            _ = porcelain.add(self._repo, paths=to_add)
        if to_remove:
            index = self._repo.open_index()
            for path_bytes in to_remove:
                if path_bytes in index:
                    del index[path_bytes]
            index.write()

    def _staged_paths(self) -> list[str]:
        """Content paths whose index entry differs from HEAD."""
        prefix = self._prefix()
        head = head_blobs(self._repo, prefix)
        index = index_blobs(self._repo, prefix)
        changed = [
            path
            for path in head.keys() | index.keys()
            if head.get(path) != index.get(path)
        ]
        return sorted(self._content_relative(path) for path in changed)

    def _staged_outside_root(self) -> list[str]:
        """Repo-relative paths outside the content root staged against HEAD."""
        prefix = self._prefix()
        if not prefix:
            return []
        head = head_blobs(self._repo, "")
        index = index_blobs(self._repo, "")
        return sorted(
            path
            for path in head.keys() | index.keys()
            if head.get(path) != index.get(path)
            and not (path == prefix or path.startswith(f"{prefix}/"))
        )

    # =========================================================================
    # Remote Methods
    # =========================================================================

    def push(
        self,
        remote: str = DEFAULT_REMOTE,
        branch: str = DEFAULT_BRANCH,
        *,
        token: str | None = None,
    ) -> None:
        """Push ``branch`` to ``remote``.

        Args:
            remote: Remote name from the repository config.
            branch: Branch to push.
            token: Explicit per-call token for HTTP(S) remotes.

        Raises:
            ConfigError: If the remote is not configured.
            AuthError: If no credentials are available or they are rejected.
            ConflictError: If the remote branch has diverged.
            TransportError: If the transport fails for any other reason.
        """
        refspec = f"refs/heads/{branch}:refs/heads/{branch}".encode()
        with self._lock.write():
            url, kwargs = self._transport(remote, token)
            self._logger.info("push_started", remote=remote, branch=branch)
            self._run_transport(
                "push",
                porcelain.push,
                remote_location=url,
                refspecs=refspec,
                **kwargs,
            )
        self._logger.info("push_completed", remote=remote, branch=branch)

    def pull(
        self,
        remote: str = DEFAULT_REMOTE,
        branch: str = DEFAULT_BRANCH,
        *,
        token: str | None = None,
    ) -> None:
        """Fast-forward ``branch`` from ``remote``.

        Args:
            remote: Remote name from the repository config.
            branch: Branch to pull.
            token: Explicit per-call token for HTTP(S) remotes.

        Raises:
            ConfigError: If the remote is not configured.
            AuthError: If no credentials are available or they are rejected.
            ConflictError: If local and remote histories have diverged, or if
                files under the content root have uncommitted changes.
            TransportError: If the transport fails for any other reason.
        """
        refspec = f"refs/heads/{branch}".encode()
        with self._lock.write():
            url, kwargs = self._transport(remote, token)
            dirty = [
                row.path
                for row in self._status_matrix()
                if row.status is not GitFileStatus.UNMODIFIED
            ]
            if dirty:
                msg = "Uncommitted content changes; commit or revert before pulling"
                raise ConflictError(msg, details=", ".join(dirty))
            self._logger.info("pull_started", remote=remote, branch=branch)
            self._run_transport(
                "pull",
                porcelain.pull,
                remote_location=url,
                refspecs=refspec,
                **kwargs,
            )
        self._logger.info("pull_completed", remote=remote, branch=branch)

    def remote_url(self, remote: str = DEFAULT_REMOTE) -> str:
        """Return the configured URL of ``remote``.

        Raises:
            ConfigError: If the remote has no URL configured.
        """
        try:
            url = self._repo.get_config().get((b"remote", remote.encode()), b"url")
        except KeyError as e:
            msg = f"Remote '{remote}' is not configured"
            raise ConfigError(msg) from e
        return decode_bytes(url)

    def _transport(
        self, remote: str, token: str | None
    ) -> tuple[str, dict[str, Any]]:  # pyright: ignore[reportExplicitAny]
        url = self.remote_url(remote)
        credentials = resolve_credentials(
            url,
            self._repo.get_config(),
            token=token,
            configured_token=self._token,
            configured_username=self._username,
            environ=self._environ,
            home=self._home,
        )
        if credentials is None:
            if requires_credentials(url):
                msg = f"No credentials available for remote '{remote}'"
                raise AuthError(msg, remediation=AUTH_REMEDIATION)
            return url, {}

        self._logger.debug(
            "credentials_resolved", remote=remote, source=credentials.source.value
        )
        return url, credentials.client_kwargs(transport_kind(url))

    def _run_transport(
        self,
        operation: str,
        func: Any,  # pyright: ignore[reportExplicitAny]
        **kwargs: Any,  # pyright: ignore[reportExplicitAny]
    ) -> None:
        errstream = io.BytesIO()
        try:
            func(
                self._repo,
                outstream=io.BytesIO(),
                errstream=errstream,
                **kwargs,
            )
        except HTTPUnauthorized as e:
            msg = f"Remote rejected credentials during {operation}"
            raise AuthError(msg, remediation=AUTH_REMEDIATION) from e
        except porcelain.DivergedBranches as e:
            msg = f"Local and remote branches have diverged; {operation} aborted"
            raise ConflictError(msg, details=str(e)) from e
        except (GitProtocolError, NotGitRepository, OSError) as e:
            msg = f"Failed to {operation}: {e}"
            raise TransportError(msg, details=_stream_text(errstream)) from e
        except porcelain.Error as e:
            msg = f"Failed to {operation}: {e}"
            raise GitError(msg, details=_stream_text(errstream)) from e

    # =========================================================================
    # History Methods
    # =========================================================================

    def history(
        self, path: str, max_entries: int | None = None
    ) -> Iterator[CommitRecord]:
        """Yield commits touching a content path, newest first.

        The walk runs under the read lock, so it never overlaps a commit,
        pull or revert. Records are collected before the first one is yielded.

        Args:
            path: Content path.
            max_entries: Maximum number of commits to yield.

        Yields:
            CommitRecord for each commit that changed the file.

        Raises:
            AccessDeniedError: If the path escapes the content root.
        """
        repo_rel = self._repo_relative(self.content_root.normalize(path))
        with self._lock.read():
            head = self._head_sha()
            if head is None:
                return

            walker = self._repo.get_walker(
                include=[head.encode("ascii")],
                paths=[repo_rel.encode("utf-8")],
                max_entries=max_entries,
            )
            records = [_entry_to_record(entry) for entry in walker]

        yield from records

    # =========================================================================
    # Revert Methods
    # =========================================================================

    def revert(self, path: str, ref: str | None = None) -> None:
        """Restore one content file from ``ref`` into the index and working tree.

        Other paths are untouched.

        Args:
            path: Content path.
            ref: Commit-ish to restore from; defaults to HEAD.

        Raises:
            AccessDeniedError: If the path escapes the content root.
            GitError: If ``ref`` cannot be resolved, or the file or the index
                cannot be written.
            ContentNotFoundError: If the file does not exist in ``ref``.
        """
        content_path = self.content_root.normalize(path)
        repo_rel = self._repo_relative(content_path)
        path_bytes = repo_rel.encode("utf-8")
        committish = ref or "HEAD"

        with self._lock.write():
            try:
                commit = parse_commit(self._repo, committish)
            except (KeyError, ValueError) as e:
                msg = f"Cannot resolve ref '{committish}'"
                raise GitError(msg, details=str(e)) from e

            try:
                mode, blob_sha = tree_lookup_path(
                    self._repo.__getitem__, commit.tree, path_bytes
                )
            except KeyError as e:
                msg = f"File not found in {committish}: {content_path}"
                raise ContentNotFoundError(
                    msg, path=content_path, source="git"
                ) from e

            blob = self._repo[blob_sha]
            if not isinstance(blob, Blob):
                msg = f"Not a file in {committish}: {content_path}"
                raise ContentNotFoundError(msg, path=content_path, source="git")

            target = self.content_root.locate(content_path)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.is_symlink() or target.exists():
                    target.unlink()
                _ = build_file_from_blob(blob, mode, str(target).encode("utf-8"))

                index = self._repo.open_index()
                index[path_bytes] = index_entry_from_stat(
                    os.lstat(target), blob_sha, mode=mode
                )
                index.write()
            except (OSError, porcelain.Error) as e:
                msg = f"Failed to restore {content_path}"
                raise GitError(msg, details=str(e)) from e

        self._logger.info("file_reverted", path=content_path, ref=committish)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _prefix(self) -> str:
        prefix = self.content_root.path.relative_to(self._root).as_posix()
        return "" if prefix == "." else prefix

    def _repo_relative(self, content_path: str) -> str:
        prefix = self._prefix()
        return f"{prefix}/{content_path}" if prefix else content_path

    def _content_relative(self, repo_path: str) -> str:
        prefix = self._prefix()
        return repo_path[len(prefix) + 1 :] if prefix else repo_path


def _stream_text(stream: io.BytesIO) -> str:
    return stream.getvalue().decode("utf-8", errors="replace").strip()


def _parse_author_line(
    author: bytes, author_time: int, author_tz: int
) -> tuple[str, str, datetime]:
    """Parse author line into name, email, and datetime.

    Args:
        author: Author bytes in "Name <email>" format.
        author_time: Unix timestamp.
        author_tz: Timezone offset in seconds east of UTC.

    Returns:
        Tuple of (name, email, datetime with the author's timezone).
    """
    author_str = author.decode("utf-8", errors="replace")
    if "<" in author_str and author_str.endswith(">"):
        name_part = author_str.rsplit("<", 1)[0].strip()
        email_part = author_str.rsplit("<", 1)[1].rstrip(">")
    else:
        name_part = author_str
        email_part = ""

    tz = timezone(timedelta(seconds=author_tz))
    return name_part, email_part, datetime.fromtimestamp(author_time, tz=tz)


def _entry_to_record(entry: object) -> CommitRecord:
    commit = entry.commit  # pyright: ignore[reportAttributeAccessIssue]

    # dulwich stubs are incomplete
    author_bytes = cast("bytes", commit.author)
    author_time = cast("int", commit.author_time)
    author_tz = cast("int", commit.author_timezone)
    message_bytes = cast("bytes", commit.message)
    parents = cast("list[bytes]", commit.parents)

    name, email, timestamp = _parse_author_line(author_bytes, author_time, author_tz)
    return CommitRecord(
        sha=decode_bytes(commit.id),
        message=message_bytes.decode("utf-8", errors="replace"),
        author_name=name,
        author_email=email,
        timestamp=timestamp,
        parent_shas=tuple(decode_bytes(p) for p in parents),
    )
