# pyright: reportUnusedCallResult=false, reportUnusedFunction=false
# ruff: noqa: D415, A002
"""Listing and lookup commands for remote refs."""

from typing import Annotated

from cyclopts import Parameter

from gitstate.cli._commands._context import OutputFormat
from gitstate.cli._commands._shared import (
    FormattableData,
    format_json,
    format_table,
    get_git,
    handle_errors,
)
from gitstate.repository import RemoteBranch, RemoteTag

from ._app import app

FilterOption = Annotated[
    str | None,
    Parameter(name=["--filter"], help="Regular expression the name must contain"),
]
FormatOption = Annotated[
    OutputFormat,
    Parameter(name=["--format", "-f"], help="Output format"),
]


def _ref_data(ref: RemoteTag | RemoteBranch) -> FormattableData:
    return {"name": ref.name, "commit_id": ref.commit_id, "ref": ref.full_name}


def _render(refs: list[RemoteTag] | list[RemoteBranch], format: OutputFormat) -> str:
    """Render refs in the requested format. Empty plain output is ""."""
    match format:
        case OutputFormat.JSON:
            return format_json([_ref_data(ref) for ref in refs])
        case OutputFormat.PLAIN:
            return "\n".join(f"{ref.commit_id}\t{ref.name}" for ref in refs)
        case OutputFormat.TABLE:
            rows = [[ref.name, ref.commit_id] for ref in refs]
            return format_table(["Name", "Commit"], rows)


def _emit(text: str) -> None:
    if text:
        print(text.rstrip())  # noqa: T201


@app.command(name="tags")
def _tags(
    url: str,
    *,
    filter: FilterOption = None,
    format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List the tags of a remote

    Args:
        url: The remote repository.
    """
    with handle_errors():
        refs = get_git().remote(url).tags(filter)
    _emit(_render(refs, format))


@app.command(name="branches")
def _branches(
    url: str,
    *,
    filter: FilterOption = None,
    format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List the branches of a remote

    Args:
        url: The remote repository.
    """
    with handle_errors():
        refs = get_git().remote(url).branches(filter)
    _emit(_render(refs, format))


@app.command(name="tag")
def _tag(
    url: str,
    name: str,
    *,
    format: FormatOption = OutputFormat.PLAIN,
) -> None:
    """Look up a single tag

    Args:
        url: The remote repository.
        name: The tag name.
    """
    with handle_errors():
        ref = get_git().remote(url).tag(name)
    _emit(_render([ref], format))


@app.command(name="branch")
def _branch(
    url: str,
    name: str,
    *,
    format: FormatOption = OutputFormat.PLAIN,
) -> None:
    """Look up a single branch

    Args:
        url: The remote repository.
        name: The branch name.
    """
    with handle_errors():
        ref = get_git().remote(url).branch(name)
    _emit(_render([ref], format))
