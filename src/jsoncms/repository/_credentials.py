"""Remote credential resolution for push and pull.

Credentials are resolved once per operation and never logged.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import unquote, urlsplit

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dulwich.config import Config

DEFAULT_USERNAME: Final = "git"

_SSH_KEY_NAMES: Final = ("id_ed25519", "id_ecdsa", "id_rsa")
_SCP_LIKE: Final = re.compile(r"^(?:[\w.-]+@)?[\w.-]+:(?!//)")

AUTH_REMEDIATION: Final = (
    "Git authentication failed. Please configure Git credentials using one "
    "of these methods:\n"
    "1. Set GIT_TOKEN environment variable\n"
    "2. Configure SSH key\n"
    "3. Use git config to store credentials"
)


class TransportKind(StrEnum):
    """How a remote URL is reached."""

    HTTP = "http"
    SSH = "ssh"
    GIT = "git"
    LOCAL = "local"


class CredentialSource(StrEnum):
    """Where resolved credentials came from."""

    EXPLICIT = "explicit"
    ENVIRONMENT = "environment"
    CREDENTIAL_STORE = "credential_store"
    SSH_KEY = "ssh_key"


def transport_kind(url: str) -> TransportKind:
    """Classify a remote URL.

    Example:
        >>> transport_kind("git@github.com:acme/site.git")
        <TransportKind.SSH: 'ssh'>
    """
    lowered = url.lower()
    if lowered.startswith(("http://", "https://")):
        return TransportKind.HTTP
    if lowered.startswith(("ssh://", "git+ssh://", "ssh+git://")):
        return TransportKind.SSH
    if lowered.startswith("git://"):
        return TransportKind.GIT
    if lowered.startswith("file://") or Path(url).is_absolute():
        return TransportKind.LOCAL
    if _SCP_LIKE.match(url):
        return TransportKind.SSH
    return TransportKind.LOCAL


@dataclass(frozen=True, slots=True)
class RemoteCredentials:
    """Credentials for one push or pull.

    Attributes:
        source: Which link of the chain supplied them.
        username: HTTP username.
        password: HTTP password or token. Excluded from repr.
        key_filename: SSH private key path.
    """

    source: CredentialSource
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    key_filename: str | None = None

    def client_kwargs(self, kind: TransportKind) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Keyword arguments for dulwich's transport for this remote kind."""
        if kind is TransportKind.HTTP and self.password is not None:
            return {"username": self.username, "password": self.password}
        if kind is TransportKind.SSH and self.key_filename is not None:
            return {"key_filename": self.key_filename}
        return {}


def _credential_store_files(home: Path, environ: Mapping[str, str]) -> list[Path]:
    xdg = environ.get("XDG_CONFIG_HOME") or str(home / ".config")
    return [home / ".git-credentials", Path(xdg) / "git" / "credentials"]


def _lookup_credential_store(
    url: str, username: str, files: list[Path]
) -> str | None:
    """Find a stored password for ``username`` at the URL's host."""
    target = urlsplit(url)
    for path in files:
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError:
            continue
        for line in lines:
            entry = urlsplit(line.strip())
            if (
                entry.scheme == target.scheme
                and entry.hostname == target.hostname
                and entry.username is not None
                and unquote(entry.username) == username
                and entry.password is not None
            ):
                return unquote(entry.password)
    return None


def _config_username(config: Config) -> str | None:
    try:
        value = config.get((b"credential",), b"username")
    except KeyError:
        return None
    return value.decode("utf-8", errors="replace").strip() or None


def resolve_credentials(
    url: str,
    repo_config: Config,
    *,
    token: str | None = None,
    configured_token: str = "",
    configured_username: str = DEFAULT_USERNAME,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> RemoteCredentials | None:
    """Resolve credentials for a remote through the credential chain.

    HTTP(S) remotes try, in order: the explicit per-call token, the
    ``GIT_TOKEN`` environment variable (username from ``GIT_USERNAME``,
    default ``git``) or the configured token, then ``credential.username``
    in the repository config combined with a matching entry in the Git
    credential store. SSH remotes need a private key under ``~/.ssh``.

    Args:
        url: Remote URL.
        repo_config: Repository config consulted for ``credential.username``.
        token: Explicit per-call token.
        configured_token: Token from jsoncms configuration.
        configured_username: Username sent with the configured token.
        environ: Mapping to read instead of ``os.environ``.
        home: Home directory to read instead of the user's.

    Returns:
        The credentials, or None when the remote needs none (local and
        ``git://`` remotes) or none could be found.
    """
    env = os.environ if environ is None else environ
    home_dir = Path.home() if home is None else home
    kind = transport_kind(url)

    if kind is TransportKind.SSH:
        for key_name in _SSH_KEY_NAMES:
            key_path = home_dir / ".ssh" / key_name
            if key_path.is_file():
                return RemoteCredentials(
                    source=CredentialSource.SSH_KEY, key_filename=str(key_path)
                )
        return None

    if kind is not TransportKind.HTTP:
        return None

    username = env.get("GIT_USERNAME") or configured_username or DEFAULT_USERNAME
    if token:
        return RemoteCredentials(
            source=CredentialSource.EXPLICIT, username=username, password=token
        )

    env_token = env.get("GIT_TOKEN") or configured_token
    if env_token:
        return RemoteCredentials(
            source=CredentialSource.ENVIRONMENT, username=username, password=env_token
        )

    store_username = _config_username(repo_config)
    if store_username is not None:
        password = _lookup_credential_store(
            url, store_username, _credential_store_files(home_dir, env)
        )
        if password is not None:
            return RemoteCredentials(
                source=CredentialSource.CREDENTIAL_STORE,
                username=store_username,
                password=password,
            )

    return None


def requires_credentials(url: str) -> bool:
    """Whether pushing to or pulling from ``url`` needs credentials."""
    return transport_kind(url) in {TransportKind.HTTP, TransportKind.SSH}
