"""Commit author identity resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from dulwich.config import StackedConfig

from jsoncms.exceptions import IdentityNotConfiguredError

if TYPE_CHECKING:
    from dulwich.config import Config
    from dulwich.repo import Repo

FALLBACK_NAME: Final = "JSON CMS"
FALLBACK_EMAIL: Final = "json-cms@example.com"

_IDENTITY_REMEDIATION: Final = (
    "Git user not configured. Please run:\n"
    'git config --global user.name "Your Name"\n'
    'git config --global user.email "you@example.com"'
)


@dataclass(frozen=True, slots=True)
class AuthorIdentity:
    """Resolved commit author.

    Attributes:
        name: Author name.
        email: Author email.
        source: Where the identity came from ("explicit", "local",
            "global" or "fallback"). Mixed sources report the lowest one.
    """

    name: str
    email: str
    source: str

    def format(self) -> bytes:
        """Return the identity as ``Name <email>`` bytes for dulwich."""
        return f"{self.name} <{self.email}>".encode()


def _config_value(config: Config, key: bytes) -> str | None:
    try:
        value = config.get((b"user",), key)
    except KeyError:
        return None
    decoded = value.decode("utf-8", errors="replace").strip()
    return decoded or None


def resolve_identity(
    repo: Repo,
    *,
    name: str = "",
    email: str = "",
    use_fallback: bool = True,
    global_config: Config | None = None,
) -> AuthorIdentity:
    """Resolve the commit author through the identity chain.

    Each of name and email is taken from the first source that sets it:
    the explicit arguments, the repository's own config, the global Git
    config, then the built-in fallback ``JSON CMS <json-cms@example.com>``.

    Args:
        repo: Repository whose local config is consulted.
        name: Explicit author name.
        email: Explicit author email.
        use_fallback: Whether the built-in fallback identity may be used.
        global_config: Global config to consult instead of the user's.

    Returns:
        The resolved AuthorIdentity.

    Raises:
        IdentityNotConfiguredError: If the fallback is disabled and no
            source sets both name and email.
    """
    if global_config is None:
        global_config = StackedConfig(StackedConfig.default_backends())

    sources: list[tuple[str, Config]] = [
        ("local", repo.get_config()),
        ("global", global_config),
    ]

    resolved_name = name.strip() or None
    resolved_email = email.strip() or None
    source = "explicit"
    for label, config in sources:
        if resolved_name is not None and resolved_email is not None:
            break
        found = False
        if resolved_name is None:
            resolved_name = _config_value(config, b"name")
            found = found or resolved_name is not None
        if resolved_email is None:
            resolved_email = _config_value(config, b"email")
            found = found or resolved_email is not None
        if found:
            source = label

    if resolved_name is None or resolved_email is None:
        if not use_fallback:
            raise IdentityNotConfiguredError(_IDENTITY_REMEDIATION)
        resolved_name = resolved_name or FALLBACK_NAME
        resolved_email = resolved_email or FALLBACK_EMAIL
        source = "fallback"

    return AuthorIdentity(name=resolved_name, email=resolved_email, source=source)
