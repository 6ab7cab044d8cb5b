# pyright: reportExplicitAny=false
"""Shared CLI utilities for commands.

This module provides common utilities used across CLI command implementations:
- Standardized exit codes and the mapping from library errors to them
- Output formatters (JSON, table)
- Helpers for building a Git client and loading repositories from disk
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Never

from rich.markup import escape

from gitstate.cli._commands._context import CLIContext
from gitstate.exceptions import (
    ConfigError,
    ExecutorError,
    FetchError,
    GitStateError,
    InvalidFilterError,
    LoadError,
    ProcessError,
    RefNotFoundError,
    TreePathError,
)
from gitstate.repository import Git

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from rich.console import Console

    from gitstate.repository import Repo

FormattableData = dict[str, Any]

__all__ = [
    "ExitCode",
    "FormattableData",
    "exit_with_error",
    "format_json",
    "format_table",
    "get_error_console",
    "get_git",
    "handle_errors",
    "load_repo",
    "prepare_output",
]


class ExitCode(IntEnum):
    """Standard exit codes for gitstate CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    PROCESS_ERROR = 4
    INTERNAL_ERROR = 5


def format_json(data: FormattableData | list[FormattableData], *, indent: bool = True) -> str:
    """Format data as JSON.

    Args:
        data: Dictionary or list of dictionaries to format.
        indent: Whether to pretty-print with indentation.

    Returns:
        JSON-formatted string representation.
    """
    import orjson

    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=options).decode("utf-8")


def format_table(headers: list[str], rows: list[list[str]]) -> str:
    """Format data as a Markdown table.

    Args:
        headers: Column headers for the table.
        rows: List of rows, where each row is a list of cell values.

    Returns:
        Markdown table string representation.
    """
    from pytablewriter import MarkdownTableWriter

    writer = MarkdownTableWriter(
        headers=headers,
        value_matrix=rows,
        margin=1,
    )
    return writer.dumps()


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr."""
    from rich.console import Console

    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(code)


@contextmanager
def handle_errors(*, console: Console | None = None) -> Iterator[None]:
    """Translate library errors raised inside the block into exit codes."""
    try:
        yield
    except (LoadError, ConfigError) as e:
        exit_with_error(str(e), ExitCode.LOAD_ERROR, console=console)
    except (InvalidFilterError, TreePathError) as e:
        exit_with_error(str(e), ExitCode.VALIDATION_ERROR, console=console)
    except RefNotFoundError as e:
        exit_with_error(str(e), ExitCode.NOT_FOUND, console=console)
    except (ProcessError, ExecutorError, FetchError) as e:
        exit_with_error(str(e), ExitCode.PROCESS_ERROR, console=console)
    except GitStateError as e:
        exit_with_error(str(e), ExitCode.INTERNAL_ERROR, console=console)


def get_git() -> Git:
    """Build a Git client from the current CLI context."""
    ctx = CLIContext.get_current()
    return Git(ctx.config, executor=ctx.executor, logger=ctx.logger)


def load_repo(git: Git, source: Path) -> Repo:
    """Load a combined or bare repository directory.

    Raises:
        LoadError: If source is not a directory or cannot be read.
    """
    if not source.is_dir():
        msg = f"Not a directory: {source}"
        raise LoadError(msg, path=source)
    return git.load_path(source)


def prepare_output(output: Path) -> None:
    """Check that output is a new or empty directory.

    Raises:
        SystemExit: With VALIDATION_ERROR if output holds anything.
    """
    if output.exists() and (not output.is_dir() or any(output.iterdir())):
        exit_with_error(
            f"Output must be a new or empty directory: {output}",
            ExitCode.VALIDATION_ERROR,
        )
