"""Local filesystem content backend."""

import os
import tempfile
from pathlib import Path
from typing import Final

from jsoncms.content._models import FileNode, NodeType, sort_nodes
from jsoncms.exceptions import ContentNotFoundError, StorageError
from jsoncms.utils._paths import ContentRoot

_JSON_SUFFIX: Final = ".json"


class LocalBackend:
    """Reads and writes content files under a sandboxed content root.

    Paths must already be normalized with ContentRoot.normalize; each one is
    checked against the root before the filesystem is touched. Writes are
    atomic: the text goes to a temporary file in the target directory which
    then replaces the destination, so a concurrent reader sees either the old
    or the new text.

    Attributes:
        root: The content root all paths resolve under.

    Example:
        >>> backend = LocalBackend(ContentRoot("content"))
        >>> backend.write("pages/home.json", '{"title": "Home"}')
        >>> backend.read("pages/home.json")
        '{"title": "Home"}'
    """

    __slots__: Final = ("root",)

    def __init__(self, root: ContentRoot) -> None:
        self.root = root

    @property
    def name(self) -> str:
        return "local"

    def read(self, path: str) -> str:
        """Read a content file as UTF-8 text.

        Args:
            path: A normalized content path.

        Returns:
            The file text.

        Raises:
            AccessDeniedError: If the path escapes the content root.
            ContentNotFoundError: If no file exists at the path.
            StorageError: If the file exists but cannot be read.
        """
        target = self.root.locate(path)
        try:
            return target.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            msg = f"File not found: {path}"
            raise ContentNotFoundError(msg, path=path, source=self.name) from e
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Failed to read file: {e}"
            raise StorageError(msg, path=path, operation="read") from e

    def write(self, path: str, text: str) -> None:
        """Write a content file atomically, creating parent directories.

        Args:
            path: A normalized content path.
            text: UTF-8 text to persist.

        Raises:
            AccessDeniedError: If the path escapes the content root.
            StorageError: If the write fails. The destination is unchanged.
        """
        target = self.root.locate(path)

        temp_path: Path | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=target.parent,
                delete=False,
                prefix=f".{target.name}.",
                suffix=".tmp",
                encoding="utf-8",
            ) as f:
                temp_path = Path(f.name)
                _ = f.write(text)

            # Path.replace() is atomic on both POSIX and Windows
            _ = temp_path.replace(target)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            msg = f"Failed to write file: {e}"
            raise StorageError(msg, path=path, operation="write") from e

    def list_tree(self) -> tuple[FileNode, ...]:
        """List JSON files under the content root.

        Hidden entries and non-JSON files are skipped and directories with no
        JSON files beneath them are omitted. Symlinked directories are not
        followed.

        Returns:
            Top-level entries, directories first then files, by name.

        Raises:
            StorageError: If the content root cannot be listed.
        """
        if not self.root.path.is_dir():
            return ()
        try:
            return self._list_dir(self.root.path)
        except OSError as e:
            msg = f"Failed to list content: {e}"
            raise StorageError(msg, path="", operation="list") from e

    def _list_dir(self, directory: Path) -> tuple[FileNode, ...]:
        nodes: list[FileNode] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                entry_path = Path(entry.path)
                if entry.is_dir(follow_symlinks=False):
                    children = self._list_dir(entry_path)
                    if children:
                        nodes.append(
                            FileNode(
                                name=entry.name,
                                path=self.root.to_content_path(entry_path),
                                type=NodeType.DIRECTORY,
                                children=children,
                            )
                        )
                elif entry.is_file() and entry.name.lower().endswith(_JSON_SUFFIX):
                    nodes.append(
                        FileNode(
                            name=entry.name,
                            path=self.root.to_content_path(entry_path),
                            type=NodeType.FILE,
                        )
                    )
        return sort_nodes(nodes)
