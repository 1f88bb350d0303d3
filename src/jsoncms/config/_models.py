"""Configuration models.

Each section of ``jsoncms.toml`` maps onto one frozen Pydantic model.
Unknown keys are ignored.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from jsoncms.content._remote import DEFAULT_API_URL

_SECTION_CONFIG: ConfigDict = ConfigDict(
    frozen=True, extra="ignore", coerce_numbers_to_str=True
)


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ContentConfig(BaseModel):
    """Content directory configuration section.

    Attributes:
        root: Content root, relative to the project root unless absolute.
        schema_dir: Schema sub-directory of the content root.
        schema_max_age: Seconds a compiled schema stays cached; None keeps
            schemas until restart.
    """

    model_config: ClassVar[ConfigDict] = _SECTION_CONFIG

    root: str = "content"
    schema_dir: str = "schema"
    schema_max_age: float | None = Field(default=None, gt=0)


class RemoteConfig(BaseModel):
    """Remote (GitHub) content backend configuration section.

    The remote is enabled only when owner, repo and token are all set.

    Attributes:
        owner: Repository owner.
        repo: Repository name.
        token: API token. Excluded from repr.
        branch: Branch to read from and write to.
        directory: Repository directory that mirrors the content root.
        api_url: REST API base URL.
        timeout: Request timeout in seconds; None disables it.
    """

    model_config: ClassVar[ConfigDict] = _SECTION_CONFIG

    owner: str = ""
    repo: str = ""
    token: str = Field(default="", repr=False)
    branch: str = "main"
    directory: str = "content"
    api_url: str = DEFAULT_API_URL
    timeout: float | None = Field(default=30.0, gt=0)

    @property
    def enabled(self) -> bool:
        return bool(self.owner and self.repo and self.token)


class GitConfig(BaseModel):
    """Local Git repository configuration section.

    Attributes:
        repo_path: Working tree root, relative to the project root unless
            absolute.
        author_name: Explicit commit author name.
        author_email: Explicit commit author email.
        use_fallback_identity: Commit as ``JSON CMS <json-cms@example.com>``
            when no identity is configured anywhere.
        token: Token used for HTTP(S) push and pull. Excluded from repr.
        username: Username sent with ``token``.
        remote: Default remote name.
        branch: Default branch name.
    """

    model_config: ClassVar[ConfigDict] = _SECTION_CONFIG

    repo_path: str = "."
    author_name: str = ""
    author_email: str = ""
    use_fallback_identity: bool = True
    token: str = Field(default="", repr=False)
    username: str = "git"
    remote: str = "origin"
    branch: str = "main"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
        max_bytes: Rotate the log file at this size.
        backup_count: Number of rotated files to keep.
    """

    model_config: ClassVar[ConfigDict] = _SECTION_CONFIG

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""
    max_bytes: int | None = Field(default=None, gt=0)
    backup_count: int | None = Field(default=None, ge=0)
