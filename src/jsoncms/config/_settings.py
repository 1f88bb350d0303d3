# pyright: reportExplicitAny=false, reportAny=false
"""Root settings object and the layered loader.

Precedence, lowest to highest: built-in defaults, ``jsoncms.toml`` in the
project root, ``JSONCMS_*`` environment variables, well-known variables
(``GITHUB_TOKEN``, ``GIT_TOKEN`` and friends), explicit overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from jsoncms.config._loader import (
    deep_merge,
    parse_env_vars,
    parse_well_known_env,
    read_toml_file,
)
from jsoncms.config._models import (
    ContentConfig,
    GitConfig,
    LoggingConfig,
    RemoteConfig,
)
from jsoncms.exceptions import ConfigValidationError
from jsoncms.utils._paths import ContentRoot

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Self

    from pydantic_core import ErrorDetails

CONFIG_FILENAME: Final = "jsoncms.toml"


def _validation_error(error: ErrorDetails, source: str | None) -> ConfigValidationError:
    key = ".".join(str(part) for part in error.get("loc", ()))
    ctx = error.get("ctx") or {}
    expected = str(ctx["expected"]) if "expected" in ctx else str(error.get("msg"))
    msg = f"Invalid configuration value for '{key}'"
    return ConfigValidationError(
        msg,
        key=key,
        value=error.get("input"),
        expected=expected,
        source=source,
    )


class Settings(BaseModel):
    """Complete, validated configuration.

    Attributes:
        project_root: Directory relative paths are resolved against.
        content: Content directory settings.
        remote: Remote content backend settings.
        git: Local Git repository settings.
        logging: Logging settings.

    Example:
        >>> settings = Settings.load(Path("/srv/site"))
        >>> settings.content_root().path
        PosixPath('/srv/site/content')
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    project_root: Path = Field(default_factory=Path.cwd)
    content: ContentConfig = ContentConfig()
    remote: RemoteConfig = RemoteConfig()
    git: GitConfig = GitConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], *, source: str | None = None
    ) -> Self:
        """Validate a configuration dictionary.

        Raises:
            ConfigValidationError: For the first invalid value.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise _validation_error(e.errors()[0], source) from e

    @classmethod
    def load(
        cls,
        project_root: Path | None = None,
        *,
        config_file: Path | None = None,
        include_env: bool = True,
        environ: Mapping[str, str] | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load settings from every source and merge them.

        Args:
            project_root: Project directory; defaults to the current directory.
            config_file: Config file to read instead of
                ``<project_root>/jsoncms.toml``. A missing file is skipped.
            include_env: Whether to read environment variables.
            environ: Mapping to read instead of ``os.environ``.
            overrides: Highest-precedence values, e.g. from the CLI.

        Returns:
            The validated Settings.

        Raises:
            ConfigLoadError: If the config file cannot be parsed.
            ConfigValidationError: If a merged value is invalid.
        """
        root = (project_root or Path.cwd()).resolve()
        path = config_file if config_file is not None else root / CONFIG_FILENAME

        data: dict[str, Any] = {}
        try:
            data = deep_merge(data, read_toml_file(path))
        except FileNotFoundError:
            pass

        if include_env:
            data = deep_merge(data, parse_env_vars(environ=environ))
            data = deep_merge(data, parse_well_known_env(environ))

        if overrides:
            data = deep_merge(data, overrides)

        data["project_root"] = root
        return cls.from_dict(data)

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path against the project root."""
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()

    def content_root(self) -> ContentRoot:
        """Build the sandboxed content root described by the settings."""
        return ContentRoot(
            self.resolve_path(self.content.root), schema_dir=self.content.schema_dir
        )

    def repo_path(self) -> Path:
        """Return the configured Git working tree root."""
        return self.resolve_path(self.git.repo_path)
