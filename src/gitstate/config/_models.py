# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models.

This module provides the Pydantic models for each configuration section and
the Config container that merges them from TOML files and the environment.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Final, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from gitstate.config._loader import (
    deep_merge,
    discover_config_files,
    parse_env_vars,
    read_toml_file,
)
from gitstate.exceptions import ConfigValidationError

DEFAULT_FILTER_REPO_COMMIT: Final = "9da70bddfa491bc50fefc3c35fd5cec773182816"
FILTER_REPO_URL_TEMPLATE: Final = (
    "https://raw.githubusercontent.com/newren/git-filter-repo/{commit}/git-filter-repo"
)


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class EnvironmentConfig(BaseModel):
    """Execution environment configuration section.

    Attributes:
        git_binary: Name or path of the git executable.
        shell: Shell used for interactive sessions.
        timeout_seconds: Per-process timeout, or None for no limit.
        cache_dir: Directory for downloaded tools (empty uses the user cache).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    git_binary: str = "git"
    shell: str = "/bin/sh"
    timeout_seconds: float | None = Field(default=None, gt=0)
    cache_dir: str = ""


class SshConfig(BaseModel):
    """SSH credentials made available to git inside the environment.

    Attributes:
        private_key: Path to a private key file on the host (empty disables).
        known_hosts: Path to a known_hosts file on the host (empty accepts
            new host keys on first use).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    private_key: str = ""
    known_hosts: str = ""


class FilterRepoConfig(BaseModel):
    """Pinned git-filter-repo installation.

    The script is only placed in environments that run ``filter-repo``
    commands, so other plans never download it.

    Attributes:
        enabled: Whether filter-repo commands get the script installed.
        commit: Upstream commit the script is pinned to.
        url: Explicit download URL; empty derives it from commit.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    enabled: bool = True
    commit: str = DEFAULT_FILTER_REPO_COMMIT
    url: str = ""

    @property
    def resolved_url(self) -> str:
        """The URL the script is downloaded from."""
        return self.url or FILTER_REPO_URL_TEMPLATE.format(commit=self.commit)


class Config(BaseModel):
    """Configuration container with typed access.

    Use the factory methods rather than the constructor so that defaults,
    files and environment variables are merged consistently.

    Example:
        >>> config = Config.from_dict({"environment": {"git_binary": "git"}})
        >>> config.filter_repo.enabled
        True
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    ssh: SshConfig = Field(default_factory=SshConfig)
    filter_repo: FilterRepoConfig = Field(default_factory=FilterRepoConfig)

    _sources: tuple[Path, ...] = PrivateAttr(default=())

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: str | None = None) -> Self:
        """Create configuration from a dictionary.

        Args:
            data: Nested dictionary of configuration values.
            source: Where the values came from, for error messages.

        Returns:
            Validated configuration.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            where = f" in {source}" if source else ""
            msg = f"Invalid configuration{where}: {e}"
            raise ConfigValidationError(msg, source=source) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If validation fails.
        """
        config = cls.from_dict(read_toml_file(path), source=str(path))
        config._sources = (path,)
        return config

    @classmethod
    def load(cls, *, cwd: Path | None = None, include_env: bool = True) -> Self:
        """Load merged configuration from all sources.

        Files are merged user, then project, then ``GITSTATE_CONFIG``;
        ``GITSTATE_<SECTION>__<KEY>`` environment variables override them.

        Args:
            cwd: Directory to search for ``gitstate.toml``.
            include_env: Whether to apply environment variable overrides.

        Returns:
            Merged configuration.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        files = discover_config_files(cwd)
        merged: dict[str, Any] = {}
        for path in files:
            merged = deep_merge(merged, read_toml_file(path))
        if include_env:
            merged = deep_merge(merged, parse_env_vars())

        source = ", ".join(str(p) for p in files) or None
        config = cls.from_dict(merged, source=source)
        config._sources = tuple(files)
        return config

    @property
    def sources(self) -> list[Path]:
        """Config files that contributed to this configuration."""
        return list(self._sources)
