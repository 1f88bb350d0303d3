# pyright: reportAny=false
"""GitHub REST API content backend.

Reads and writes the same logical content files as the local backend through
the repository contents API. Writes use the current blob SHA for optimistic
concurrency. There are no automatic retries.
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any, Final, Self
from urllib.parse import quote

import httpx

from jsoncms.content._models import FileNode, NodeType, sort_nodes
from jsoncms.exceptions import (
    AuthError,
    ContentNotFoundError,
    RemoteNotConfiguredError,
    RemoteUnavailableError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from jsoncms.config import RemoteConfig

DEFAULT_API_URL: Final = "https://api.github.com"

_RAW_MEDIA_TYPE: Final = "application/vnd.github.raw"
_JSON_MEDIA_TYPE: Final = "application/vnd.github+json"
_JSON_SUFFIX: Final = ".json"
_AUTH_REMEDIATION: Final = (
    "Check that GITHUB_TOKEN is set to a token with contents access "
    "to the configured repository."
)


class RemoteBackend:
    """Content backend backed by a GitHub repository.

    A backend is "configured" when owner, repository and token are all set.
    Every operation on an unconfigured backend raises
    RemoteNotConfiguredError.

    Attributes:
        owner: Repository owner (user or organization).
        repo: Repository name.
        branch: Branch read from and committed to.
        directory: Directory inside the repository that mirrors the content
            root, or empty for the repository root.

    Example:
        >>> with RemoteBackend(owner="acme", repo="site", token="...") as remote:
        ...     remote.read("pages/home.json")
        '{"title": "Home"}'
    """

    __slots__: Final = (
        "_client",
        "_owns_client",
        "_token",
        "branch",
        "directory",
        "owner",
        "repo",
    )

    def __init__(
        self,
        *,
        owner: str = "",
        repo: str = "",
        token: str = "",
        branch: str = "main",
        directory: str = "",
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            owner: Repository owner.
            repo: Repository name.
            token: API token sent as ``Authorization: token <token>``.
            branch: Branch to read from and write to.
            directory: Repository directory that mirrors the content root.
            api_url: Base URL of the REST API.
            timeout: Request timeout in seconds for the client created here.
                None disables the timeout. Ignored when ``client`` is given.
            client: Preconfigured client to use. The caller keeps ownership
                and supplies its own timeouts.
        """
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.directory = directory.strip("/")
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=api_url, timeout=timeout)

    @classmethod
    def from_config(
        cls, config: RemoteConfig, *, client: httpx.Client | None = None
    ) -> Self:
        """Create a backend from the ``[remote]`` configuration section."""
        return cls(
            owner=config.owner,
            repo=config.repo,
            token=config.token,
            branch=config.branch,
            directory=config.directory,
            api_url=config.api_url,
            timeout=config.timeout,
            client=client,
        )

    def __repr__(self) -> str:
        return (
            f"RemoteBackend(owner={self.owner!r}, repo={self.repo!r}, "
            f"branch={self.branch!r})"
        )

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
        """Close the HTTP client if this backend created it."""
        if self._owns_client:
            self._client.close()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def name(self) -> str:
        return "remote"

    @property
    def configured(self) -> bool:
        """True when owner, repository and token are all set."""
        return not self.missing_settings()

    def missing_settings(self) -> list[str]:
        """Names of the required settings that are empty."""
        return [
            key
            for key, value in (
                ("owner", self.owner),
                ("repo", self.repo),
                ("token", self._token),
            )
            if not value
        ]

    # =========================================================================
    # Content Operations
    # =========================================================================

    def read(self, path: str) -> str:
        """Fetch the raw text of a content file.

        Args:
            path: A normalized content path.

        Returns:
            The file text on the configured branch.

        Raises:
            RemoteNotConfiguredError: If owner, repo or token is missing.
            ContentNotFoundError: If the file does not exist remotely.
            AuthError: If the token is rejected.
            RemoteUnavailableError: On any other failure.
        """
        response = self._request(
            "GET",
            self._contents_url(path),
            params={"ref": self.branch},
            accept=_RAW_MEDIA_TYPE,
        )
        self._raise_for_status(response, path)
        return response.text

    def write(self, path: str, text: str, *, message: str | None = None) -> None:
        """Create or update a content file with a single commit.

        The current blob SHA is looked up first and sent with the update, so
        a concurrent change on the remote is rejected rather than overwritten.

        Args:
            path: A normalized content path.
            text: New file text.
            message: Commit message; defaults to ``Update <path>``.

        Raises:
            RemoteNotConfiguredError: If owner, repo or token is missing.
            AuthError: If the token is rejected.
            RemoteUnavailableError: On any other failure, including a SHA
                mismatch reported by the host.
        """
        sha = self._blob_sha(path)

        payload: dict[str, Any] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
            "branch": self.branch,
        }
        if sha is not None:
            payload["sha"] = sha

        response = self._request(
            "PUT", self._contents_url(path), json=payload, accept=_JSON_MEDIA_TYPE
        )
        self._raise_for_status(response, path)

    def head_sha(self) -> str:
        """Return the commit SHA at the tip of the configured branch.

        Raises:
            RemoteNotConfiguredError: If owner, repo or token is missing.
            ContentNotFoundError: If the branch does not exist.
            AuthError: If the token is rejected.
            RemoteUnavailableError: On any other failure.
        """
        url = f"/repos/{self.owner}/{self.repo}/git/refs/heads/{quote(self.branch)}"
        response = self._request("GET", url, accept=_JSON_MEDIA_TYPE)
        self._raise_for_status(response, f"refs/heads/{self.branch}")
        return str(self._json(response)["object"]["sha"])

    def list_tree(self) -> tuple[FileNode, ...]:
        """List JSON files in the mirrored directory, recursively.

        Hidden entries and non-JSON files are skipped and empty directories
        are omitted. A missing directory yields an empty tree.

        Raises:
            RemoteNotConfiguredError: If owner, repo or token is missing.
            AuthError: If the token is rejected.
            RemoteUnavailableError: On any other failure.
        """
        return self._list_dir("")

    def _list_dir(self, path: str) -> tuple[FileNode, ...]:
        response = self._request(
            "GET",
            self._contents_url(path),
            params={"ref": self.branch},
            accept=_JSON_MEDIA_TYPE,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return ()
        self._raise_for_status(response, path)

        items = self._json(response)
        if not isinstance(items, list):
            return ()

        nodes: list[FileNode] = []
        for item in items:
            name = str(item["name"])
            if name.startswith("."):
                continue
            child_path = f"{path}/{name}" if path else name
            if item["type"] == "dir":
                children = self._list_dir(child_path)
                if children:
                    nodes.append(
                        FileNode(
                            name=name,
                            path=child_path,
                            type=NodeType.DIRECTORY,
                            children=children,
                        )
                    )
            elif item["type"] == "file" and name.lower().endswith(_JSON_SUFFIX):
                nodes.append(FileNode(name=name, path=child_path, type=NodeType.FILE))
        return sort_nodes(nodes)

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _contents_url(self, path: str) -> str:
        full = f"{self.directory}/{path}" if self.directory else path
        return f"/repos/{self.owner}/{self.repo}/contents/{quote(full.strip('/'))}"

    def _blob_sha(self, path: str) -> str | None:
        """Return the SHA of the file's current blob, or None if it is absent."""
        response = self._request(
            "GET",
            self._contents_url(path),
            params={"ref": self.branch},
            accept=_JSON_MEDIA_TYPE,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response, path)

        data = self._json(response)
        if not isinstance(data, dict) or "sha" not in data:
            msg = f"Remote path is not a file: {path}"
            raise RemoteUnavailableError(
                msg, status_code=response.status_code, status_text="not a file"
            )
        return str(data["sha"])

    def _request(
        self,
        method: str,
        url: str,
        *,
        accept: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        missing = self.missing_settings()
        if missing:
            msg = f"Remote backend is not configured: missing {', '.join(missing)}"
            raise RemoteNotConfiguredError(msg, missing=missing)

        headers = {
            "Authorization": f"token {self._token}",
            "Accept": accept,
        }
        try:
            return self._client.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            msg = f"Remote request failed: {e}"
            raise RemoteUnavailableError(msg, status_text=str(e)) from e

    def _raise_for_status(self, response: httpx.Response, path: str) -> None:
        if response.is_success:
            return
        if response.status_code == httpx.codes.NOT_FOUND:
            msg = f"File not found: {path}"
            raise ContentNotFoundError(msg, path=path, source=self.name)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            msg = "Remote rejected the configured token"
            raise AuthError(msg, remediation=_AUTH_REMEDIATION)
        msg = f"Remote error {response.status_code}: {response.reason_phrase}"
        raise RemoteUnavailableError(
            msg,
            status_code=response.status_code,
            status_text=response.reason_phrase,
        )

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            msg = f"Remote returned malformed JSON: {e}"
            raise RemoteUnavailableError(
                msg, status_code=response.status_code, status_text="malformed body"
            ) from e
