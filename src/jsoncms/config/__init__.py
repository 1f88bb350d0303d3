"""jsoncms configuration.

Settings are read from ``jsoncms.toml`` in the project root and from the
environment, then validated into frozen Pydantic models.

Example:
    >>> from jsoncms.config import Settings
    >>> settings = Settings.load()
    >>> settings.remote.branch
    'main'
"""

from jsoncms.config._loader import (
    ENV_PREFIX,
    WELL_KNOWN_ENV_VARS,
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    parse_well_known_env,
    read_toml_file,
    set_nested_key,
)
from jsoncms.config._models import (
    ContentConfig,
    GitConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    RemoteConfig,
)
from jsoncms.config._settings import CONFIG_FILENAME, Settings
from jsoncms.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

__all__ = [
    "CONFIG_FILENAME",
    "ENV_PREFIX",
    "WELL_KNOWN_ENV_VARS",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "ContentConfig",
    "GitConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RemoteConfig",
    "Settings",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "parse_well_known_env",
    "read_toml_file",
    "set_nested_key",
]
