"""gitstate exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


class GitStateError(Exception):
    """Base exception for gitstate errors."""


# =============================================================================
# Tree Exceptions
# =============================================================================


class TreePathError(GitStateError, ValueError):
    """Raised when a tree path is absolute or escapes the tree root.

    Attributes:
        path: The offending path.
    """

    def __init__(self, message: str, *, path: str) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The offending path.
        """
        super().__init__(message)
        self.path: str = path


# =============================================================================
# Execution Environment Exceptions
# =============================================================================


class ExecutorError(GitStateError):
    """Raised when the execution environment itself cannot run a plan.

    This covers failures that happen before or around a process, such as a
    missing executable or an unwritable scratch directory. A process that
    runs and exits non-zero raises ProcessError instead.
    """


class ProcessError(GitStateError):
    """Raised when a process in the execution environment exits non-zero.

    Attributes:
        argv: The command that failed.
        exit_code: The process exit code.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            argv: The command that failed.
            exit_code: The process exit code.
            stdout: Captured standard output.
            stderr: Captured standard error.
        """
        super().__init__(message)
        self.argv: tuple[str, ...] = tuple(argv)
        self.exit_code: int = exit_code
        self.stdout: str = stdout
        self.stderr: str = stderr

    def __str__(self) -> str:
        message = super().__str__()
        stderr = self.stderr.strip()
        if stderr:
            return f"{message}\n{stderr}"
        return message


class FetchError(GitStateError):
    """Raised when a remote file cannot be downloaded into the environment.

    Attributes:
        url: The URL that could not be fetched.
    """

    def __init__(self, message: str, *, url: str) -> None:
        """Initialize with error message and URL context."""
        super().__init__(message)
        self.url: str = url


# =============================================================================
# Repository Exceptions
# =============================================================================


class LoadError(GitStateError):
    """Raised when a source cannot be classified as bare state or combined repo.

    Attributes:
        path: The on-disk source, when loading from the filesystem.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: The on-disk source, when loading from the filesystem.
        """
        super().__init__(message)
        self.path: Path | None = path


# =============================================================================
# Remote Exceptions
# =============================================================================


class InvalidFilterError(GitStateError, ValueError):
    """Raised when a ref name filter is not a valid regular expression.

    Attributes:
        pattern: The pattern that failed to compile.
    """

    def __init__(self, message: str, *, pattern: str) -> None:
        """Initialize with error message and pattern context."""
        super().__init__(message)
        self.pattern: str = pattern


class RefNotFoundError(GitStateError, LookupError):
    """Raised when a single tag or branch lookup matches nothing.

    Attributes:
        url: The remote that was queried.
        name: The ref name that was looked up.
        kind: Either "tag" or "branch".
    """

    def __init__(self, message: str, *, url: str, name: str, kind: str) -> None:
        """Initialize with error message and lookup context.

        Args:
            message: Human-readable error message.
            url: The remote that was queried.
            name: The ref name that was looked up.
            kind: Either "tag" or "branch".
        """
        super().__init__(message)
        self.url: str = url
        self.name: str = name
        self.kind: str = kind


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(GitStateError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration values fail validation.

    Attributes:
        source: The file or source name the invalid values came from.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        """Initialize with error message and source context."""
        super().__init__(message)
        self.source: str | None = source
