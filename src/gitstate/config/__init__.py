"""gitstate configuration.

Configuration is read from TOML files and ``GITSTATE_*`` environment
variables and exposed as frozen Pydantic models.

Example:
    >>> from gitstate.config import Config
    >>> config = Config.load()
    >>> config.environment.git_binary
    'git'
"""

from gitstate.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

from ._load import safe_load_config
from ._loader import (
    deep_merge,
    discover_config_files,
    get_user_config_file,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    DEFAULT_FILTER_REPO_COMMIT,
    Config,
    EnvironmentConfig,
    FilterRepoConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    SshConfig,
)

__all__ = [
    "DEFAULT_FILTER_REPO_COMMIT",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "EnvironmentConfig",
    "FilterRepoConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "SshConfig",
    "deep_merge",
    "discover_config_files",
    "get_user_config_file",
    "parse_env_vars",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
