# pyright: reportAny=false, reportExplicitAny=false
"""TOML configuration file loading and merging."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Final

import platformdirs

from gitstate.exceptions import ConfigLoadError

ENV_PREFIX: Final = "GITSTATE_"
CONFIG_PATH_ENV: Final = "GITSTATE_CONFIG"
PROJECT_CONFIG_NAME: Final = "gitstate.toml"

# Process-level switches that are not configuration keys.
_RESERVED_ENV: Final = frozenset(
    {"CONFIG", "DEBUG", "STRICT_CONFIG", "CACHE_BUSTER", "LOG_LEVEL"}
)


def read_toml_file(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            # Position attributes are only present on newer Pythons.
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two configuration dictionaries.

    Merges `override` into `base`, returning a new dictionary. Neither input
    is modified. Nested tables merge recursively; every other value in
    `override` replaces the value in `base`.

    Args:
        base: Base configuration (lower precedence).
        override: Override configuration (higher precedence).

    Returns:
        Merged configuration dictionary.
    """
    result: dict[str, Any] = {key: copy_value(value) for key, value in base.items()}
    for key, override_val in override.items():
        base_val = result.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            result[key] = deep_merge(base_val, override_val)
        else:
            result[key] = copy_value(override_val)
    return result


def copy_value(value: Any) -> Any:
    """Create a deep copy of a configuration value."""
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def set_nested_key(data: dict[str, Any], dotted_key: str, value: Any) -> None:
    """Set a value in a nested dictionary using a dotted key path.

    Intermediate tables are created as needed; a non-table value in the way
    is replaced by a table.
    """
    parts = dotted_key.split(".")
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def _parse_env_value(value: str) -> Any:
    """Parse an environment variable value with type inference.

    Order of type inference: boolean (true/false, case-insensitive), float
    (when it contains a decimal point), JSON array, then plain string.
    Integers are left as strings so that numeric-looking paths survive;
    pydantic coerces them where a number is expected.
    """
    lower_value = value.lower()
    if lower_value in ("true", "false"):
        return lower_value == "true"

    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass

    if value.startswith("[") and value.endswith("]"):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def parse_env_vars(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Parse environment variables into a config dictionary.

    Environment variable naming:
        - Add prefix (GITSTATE_)
        - Convert to uppercase
        - Replace dots with double underscores
        - Example: logging.level -> GITSTATE_LOGGING__LEVEL

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary of parsed config values with nested structure.
    """
    result: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        config_key = key[len(prefix) :]
        if not config_key or config_key in _RESERVED_ENV:
            continue
        config_path = config_key.replace("__", ".").lower()
        set_nested_key(result, config_path, _parse_env_value(value))
    return result


def get_user_config_file() -> Path:
    """Return the per-user config file location."""
    return Path(platformdirs.user_config_dir("gitstate")) / "config.toml"


def discover_config_files(cwd: Path | None = None) -> list[Path]:
    """Find config files that exist, lowest precedence first.

    Sources, from lowest to highest precedence: the user config file,
    ``gitstate.toml`` in the working directory, then the file named by
    ``GITSTATE_CONFIG``.

    Args:
        cwd: Directory to search for a project config. Defaults to the
            current working directory.

    Returns:
        Existing config file paths in merge order.

    Raises:
        ConfigLoadError: If ``GITSTATE_CONFIG`` names a missing file.
    """
    if cwd is None:
        cwd = Path.cwd()

    found: list[Path] = []
    user_file = get_user_config_file()
    if user_file.is_file():
        found.append(user_file)

    project_file = cwd / PROJECT_CONFIG_NAME
    if project_file.is_file():
        found.append(project_file)

    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        explicit_path = Path(explicit).expanduser()
        if not explicit_path.is_file():
            msg = f"{CONFIG_PATH_ENV} points to a missing file: {explicit_path}"
            raise ConfigLoadError(msg, path=explicit_path)
        found.append(explicit_path)

    return found
