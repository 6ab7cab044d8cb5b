# pyright: reportUnusedCallResult=false
"""CLI context for global state management.

The CLIContext is set once at CLI startup and made available to all commands
via contextvars.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from gitstate.config import Config

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from gitstate.environment import ExecutorProtocol


class OutputFormat(StrEnum):
    """Supported output formats for listing commands."""

    TABLE = "table"
    JSON = "json"
    PLAIN = "plain"


_current_cli_context: contextvars.ContextVar[CLIContext | None] = (
    contextvars.ContextVar("cli_context", default=None)
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global CLI context with configuration and options.

    Attributes:
        config: Loaded configuration object.
        verbose: Enable debug logging.
        config_error: Error message if config loading failed.
        logger: Structured logger for commands.
        executor: Executor override; None builds a LocalExecutor from config.
    """

    config: Config = field(repr=False)
    verbose: bool = False
    config_error: str | None = None
    logger: FilteringBoundLogger | None = field(default=None, repr=False)
    executor: ExecutorProtocol | None = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> CLIContext:
        """Get the active CLIContext, or a default one if none is set."""
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx
        return cls(config=Config.from_dict({}))

    @classmethod
    def set_current(cls, ctx: CLIContext) -> None:
        """Set the active CLIContext."""
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Reset to the default context."""
        _current_cli_context.set(None)
