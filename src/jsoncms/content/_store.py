"""Content store: local-first reads and validation-gated dual writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Self

from jsoncms.content._local import LocalBackend
from jsoncms.content._models import Failed, Found, Missing, WriteResult
from jsoncms.content._remote import RemoteBackend
from jsoncms.exceptions import ContentNotFoundError, JsoncmsError
from jsoncms.schema import SchemaRegistry, SchemaValidator
from jsoncms.utils._locks import KeyedLock
from jsoncms.utils._logging import create_null_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from jsoncms.config import Settings
    from jsoncms.content._models import FileNode, ReadOutcome
    from jsoncms.content._protocol import ContentBackend


def attempt_read(backend: ContentBackend, path: str) -> ReadOutcome:
    """Read from one backend, folding its errors into a typed outcome.

    Args:
        backend: The backend to read from.
        path: A normalized content path.

    Returns:
        Found with the text, Missing when the backend does not hold the
        file, or Failed for any other jsoncms error.
    """
    try:
        return Found(text=backend.read(path), source=backend.name)
    except ContentNotFoundError as e:
        return Missing(error=e)
    except JsoncmsError as e:
        return Failed(error=e)


class ContentStore:
    """Single entry point for reading, writing and listing content.

    Reads prefer the local working copy and fall back to the remote backend
    when one is configured. Writes are validated first; invalid text never
    reaches either backend. A valid write goes to the local backend and is
    then mirrored to the remote on a best-effort basis.

    At most one write per normalized path is in flight at a time, admitted in
    arrival order. Writes to different paths proceed independently and reads
    take no lock.

    Attributes:
        local: The local filesystem backend.
        remote: The remote backend, or None when no remote is configured.
        validator: Schema validator applied to every write.

    Example:
        >>> store = ContentStore(local, validator, remote=remote)
        >>> store.write("pages/home.json", '{"title": "Home"}').remote_synced
        True
        >>> store.read("pages/home.json")
        '{"title": "Home"}'
    """

    __slots__: Final = ("_locks", "_logger", "local", "remote", "validator")

    def __init__(
        self,
        local: LocalBackend,
        validator: SchemaValidator,
        *,
        remote: RemoteBackend | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.local = local
        self.validator = validator
        self._locks = KeyedLock()
        self._logger = logger if logger is not None else create_null_logger()

        if remote is not None and not remote.configured:
            self._logger.warning(
                "remote_not_configured", missing=remote.missing_settings()
            )
            remote.close()
            remote = None
        self.remote = remote

    @classmethod
    def from_settings(
        cls, settings: Settings, *, logger: FilteringBoundLogger | None = None
    ) -> Self:
        """Build a store over the configured content root and remote."""
        root = settings.content_root()
        registry = SchemaRegistry(root, max_age=settings.content.schema_max_age)
        remote = (
            RemoteBackend.from_config(settings.remote)
            if settings.remote.enabled
            else None
        )
        return cls(
            LocalBackend(root), SchemaValidator(registry), remote=remote, logger=logger
        )

    def close(self) -> None:
        """Release the remote backend's HTTP client."""
        if self.remote is not None:
            self.remote.close()

    def normalize(self, path: str) -> str:
        """Normalize a caller-supplied path against the content root.

        Raises:
            AccessDeniedError: If the path escapes the content root.
        """
        return self.local.root.normalize(path)

    def read(self, path: str) -> str:
        """Read a content file, local first.

        A local miss falls through to the remote backend. A remote miss or
        failure surfaces the local miss, with the remote error chained as its
        cause.

        Args:
            path: Content path as supplied by the caller.

        Returns:
            The file text.

        Raises:
            AccessDeniedError: If the path escapes the content root.
            ContentNotFoundError: If no backend holds the file.
            StorageError: If the local file exists but cannot be read.
        """
        content_path = self.normalize(path)

        local_outcome = attempt_read(self.local, content_path)
        if isinstance(local_outcome, Found):
            return local_outcome.text
        if isinstance(local_outcome, Failed):
            raise local_outcome.error
        missing = local_outcome.error

        if self.remote is None:
            raise missing

        remote_outcome = attempt_read(self.remote, content_path)
        if isinstance(remote_outcome, Found):
            self._logger.debug("read_from_remote", path=content_path)
            return remote_outcome.text

        error = remote_outcome.error
        self._logger.info(
            "remote_read_failed",
            path=content_path,
            kind=error.kind.value,
            error=error.message,
        )
        raise missing from error

    def write(self, path: str, text: str) -> WriteResult:
        """Validate and persist a content file.

        Args:
            path: Content path as supplied by the caller.
            text: Candidate JSON text.

        Returns:
            WriteResult telling whether the remote copy was updated too.

        Raises:
            AccessDeniedError: If the path escapes the content root.
            InvalidJsonError: If the text is not valid JSON.
            SchemaViolationError: If the value violates the path's schema.
            SchemaLoadError: If the path's schema file is unusable.
            StorageError: If the local write fails.
        """
        content_path = self.normalize(path)
        _ = self.validator.validate(content_path, text)

        with self._locks.hold(content_path):
            self.local.write(content_path, text)
            self._logger.info("content_written", path=content_path, size=len(text))

            remote_synced = False
            if self.remote is not None:
                try:
                    self.remote.write(content_path, text)
                except JsoncmsError as e:
                    self._logger.warning(
                        "remote_write_failed",
                        path=content_path,
                        kind=e.kind.value,
                        error=e.message,
                    )
                else:
                    remote_synced = True

        return WriteResult(path=content_path, content=text, remote_synced=remote_synced)

    def list_tree(self) -> tuple[FileNode, ...]:
        """List the JSON file tree.

        The local tree is used unless it is empty or unreadable, in which case
        the remote tree is listed when a remote is configured.

        Raises:
            StorageError: If the local tree is unreadable and there is no
                remote to fall back to.
        """
        try:
            nodes = self.local.list_tree()
        except JsoncmsError as e:
            if self.remote is None:
                raise
            self._logger.warning(
                "local_list_failed", kind=e.kind.value, error=e.message
            )
            nodes = ()

        if nodes or self.remote is None:
            return nodes

        try:
            return self.remote.list_tree()
        except JsoncmsError as e:
            self._logger.warning(
                "remote_list_failed", kind=e.kind.value, error=e.message
            )
            return ()
