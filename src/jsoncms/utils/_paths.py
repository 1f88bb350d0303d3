"""Content path normalization and sandboxing.

A content path is a slash-separated path relative to the content root.
Normalization is purely lexical and happens before any filesystem call, so a
path that escapes the root is rejected without touching the disk.
"""

import posixpath
import re
from pathlib import Path
from typing import Final

from jsoncms.exceptions import AccessDeniedError

_JSON_SUFFIX: Final = ".json"
_SCHEMA_SUFFIX: Final = ".schema.json"
_WINDOWS_DRIVE: Final = re.compile(r"^[A-Za-z]:")


class ContentRoot:
    """The sandboxed directory under which all content paths resolve.

    Attributes:
        path: Absolute, resolved path of the content root.
        schema_dir: Name of the schema sub-directory.

    Example:
        >>> root = ContentRoot(Path("/srv/site/content"))
        >>> root.normalize("content/pages/home.json")
        'pages/home.json'
        >>> root.normalize("../../etc/passwd")
        Traceback (most recent call last):
        ...
        jsoncms.exceptions.AccessDeniedError: Path escapes content root: ...
    """

    __slots__: Final = ("_path", "_schema_dir")

    def __init__(self, path: Path | str, *, schema_dir: str = "schema") -> None:
        self._path = Path(path).resolve()
        self._schema_dir = schema_dir.strip("/")

    @property
    def path(self) -> Path:
        return self._path

    @property
    def schema_dir(self) -> str:
        return self._schema_dir

    def __repr__(self) -> str:
        return f"ContentRoot({str(self._path)!r})"

    def _deny(self, raw: str, reason: str) -> AccessDeniedError:
        return AccessDeniedError(f"{reason}: {raw!r}", path=raw, root=self._path)

    def normalize(self, raw: str) -> str:
        """Normalize a caller-supplied path to a root-relative content path.

        Leading slashes and a redundant leading root-directory segment are
        stripped. An absolute path is only accepted when it lies under the
        absolute content root.

        Args:
            raw: The path as supplied by the caller.

        Returns:
            The normalized, slash-separated relative path.

        Raises:
            AccessDeniedError: If the path is empty, names the root itself,
                or escapes the root.
        """
        if "\x00" in raw:
            raise self._deny(raw, "Path contains a NUL byte")
        if _WINDOWS_DRIVE.match(raw):
            raise self._deny(raw, "Path escapes content root")

        candidate = raw.replace("\\", "/")
        root_str = self._path.as_posix()

        if candidate.startswith("/"):
            absolute = posixpath.normpath(candidate)
            if absolute == root_str or absolute.startswith(f"{root_str}/"):
                candidate = posixpath.relpath(absolute, root_str)
            else:
                stripped = candidate.lstrip("/")
                if stripped.split("/", 1)[0] != self._path.name:
                    raise self._deny(raw, "Path escapes content root")
                candidate = stripped

        normalized = posixpath.normpath(candidate)
        head, _, tail = normalized.partition("/")
        if head == self._path.name and tail:
            normalized = tail

        if normalized in {"", ".", self._path.name}:
            raise self._deny(raw, "Path does not name a content file")
        if (
            normalized == ".."
            or normalized.startswith("../")
            or _WINDOWS_DRIVE.match(normalized)
        ):
            raise self._deny(raw, "Path escapes content root")
        return normalized

    def resolve(self, raw: str) -> Path:
        """Normalize a path and return its absolute location under the root.

        Args:
            raw: The path as supplied by the caller.

        Returns:
            The absolute path, with symlinks resolved.

        Raises:
            AccessDeniedError: If the path escapes the root, lexically or
                through a symlink.
        """
        return self.locate(self.normalize(raw))

    def locate(self, content_path: str) -> Path:
        """Return the absolute location of an already-normalized content path.

        Unlike ``resolve``, no root-name stripping is applied, so calling this
        on a normalized path is stable. Anything that is not a clean relative
        path is rejected.

        Args:
            content_path: A normalized content path.

        Returns:
            The absolute path, with symlinks resolved.

        Raises:
            AccessDeniedError: If the path is not normalized or escapes the
                root, lexically or through a symlink.
        """
        if (
            "\x00" in content_path
            or "\\" in content_path
            or content_path.startswith("/")
            or _WINDOWS_DRIVE.match(content_path)
            or posixpath.normpath(content_path) != content_path
            or content_path in {".", ".."}
            or content_path.startswith("../")
        ):
            raise self._deny(content_path, "Path escapes content root")
        resolved = (self._path / content_path).resolve()
        if resolved == self._path or not resolved.is_relative_to(self._path):
            raise self._deny(content_path, "Path escapes content root")
        return resolved

    def to_content_path(self, absolute: Path) -> str:
        """Convert an absolute path under the root to a content path."""
        return absolute.relative_to(self._path).as_posix()

    def schema_path_for(self, content_path: str) -> Path | None:
        """Locate the schema file bound to a content path by naming convention.

        ``{name}.json`` is validated by ``{schema_dir}/{name}.schema.json``.

        Args:
            content_path: A normalized content path.

        Returns:
            The schema file location, or None when the path cannot carry a
            schema (not a ``.json`` file, or itself inside the schema
            directory).
        """
        if not content_path.endswith(_JSON_SUFFIX):
            return None
        if content_path.split("/", 1)[0] == self._schema_dir:
            return None
        stem = content_path.removesuffix(_JSON_SUFFIX)
        return self._path / self._schema_dir / f"{stem}{_SCHEMA_SUFFIX}"
