"""gitstate CLI commands."""
# pyright: reportUnusedCallResult=false

from cyclopts import App

from ._context import CLIContext, OutputFormat
from ._remote import app as remote_app
from ._repo import checkout, clone, filter_history, init, shell
from ._shared import (
    ExitCode,
    FormattableData,
    exit_with_error,
    format_json,
    format_table,
    get_error_console,
    get_git,
    handle_errors,
)

__all__ = [
    "CLIContext",
    "ExitCode",
    "FormattableData",
    "OutputFormat",
    "exit_with_error",
    "format_json",
    "format_table",
    "get_error_console",
    "get_git",
    "handle_errors",
    "register_commands",
    "remote_app",
]


def register_commands(app: App) -> None:
    app.command(init, name="init")
    app.command(clone, name="clone")
    app.command(checkout, name="checkout")
    app.command(filter_history, name="filter")
    app.command(shell, name="shell")
    app.command(remote_app)
