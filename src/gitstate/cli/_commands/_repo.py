# pyright: reportUnusedCallResult=false
# ruff: noqa: D415, TC003  # Path needed at runtime for cyclopts parameter parsing
"""Repository commands: create, transform and inspect snapshots on disk.

Every command reads its input into memory, runs git in a scratch
environment, and writes the resulting repository to a new directory. The
input directory is never modified.
"""

from pathlib import Path
from typing import Annotated

from cyclopts import Parameter
from rich.console import Console

from gitstate.cli._commands._shared import (
    ExitCode,
    exit_with_error,
    get_git,
    handle_errors,
    load_repo,
    prepare_output,
)

__all__ = ["checkout", "clone", "filter_history", "init", "shell"]

OutputOption = Annotated[
    Path,
    Parameter(name=["--output", "-o"], help="Directory to write the repository to"),
]


def init(*, output: OutputOption) -> None:
    """Create an empty repository"""
    prepare_output(output)
    with handle_errors():
        get_git().init().export(output)
    Console().print(f"[green]Initialized empty repository in {output}[/green]")


def clone(
    url: str,
    *,
    output: OutputOption,
    ref: Annotated[
        str | None,
        Parameter(help="Branch, tag or commit to check out after cloning"),
    ] = None,
) -> None:
    """Clone a remote repository

    Args:
        url: Anything git clone accepts.
    """
    prepare_output(output)
    with handle_errors():
        repo = get_git().clone(url)
        if ref:
            repo = repo.checkout(ref)
        repo.export(output)
    Console().print(f"[green]Cloned {url} into {output}[/green]")


def checkout(source: Path, ref: str, *, output: OutputOption) -> None:
    """Check out a ref into a copy of a repository

    Args:
        source: Repository directory, with .git or bare.
        ref: Branch, tag or commit to check out.
    """
    prepare_output(output)
    with handle_errors():
        git = get_git()
        load_repo(git, source).checkout(ref).export(output)
    Console().print(f"[green]Checked out {ref} into {output}[/green]")


def filter_history(
    source: Path,
    *,
    output: OutputOption,
    subdirectory: Annotated[
        str | None,
        Parameter(help="Keep only this directory and make it the root"),
    ] = None,
    to_subdirectory: Annotated[
        str | None,
        Parameter(help="Move the whole repository under this directory"),
    ] = None,
) -> None:
    """Rewrite history with git-filter-repo

    Exactly one of --subdirectory and --to-subdirectory is required.

    Args:
        source: Repository directory, with .git or bare.
    """
    if (subdirectory is None) == (to_subdirectory is None):
        exit_with_error(
            "Pass exactly one of --subdirectory or --to-subdirectory",
            ExitCode.VALIDATION_ERROR,
        )
    prepare_output(output)
    with handle_errors():
        repo = load_repo(get_git(), source)
        if subdirectory is not None:
            repo = repo.filter_subdirectory(subdirectory)
        elif to_subdirectory is not None:
            repo = repo.filter_to_subdirectory(to_subdirectory)
        repo.export(output)
    Console().print(f"[green]Filtered history written to {output}[/green]")


def shell(source: Path) -> None:
    """Open a shell with a copy of a repository mounted

    Changes made in the shell are discarded when it exits.

    Args:
        source: Repository directory, with .git or bare.
    """
    with handle_errors():
        exit_code = load_repo(get_git(), source).terminal()
    if exit_code != 0:
        raise SystemExit(exit_code)
