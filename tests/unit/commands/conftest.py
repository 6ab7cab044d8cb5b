from collections.abc import Callable, Iterator
from io import StringIO

import pytest
from rich.console import Console

from gitstate.cli import create_app
from gitstate.cli._commands._context import CLIContext
from gitstate.config import Config
from gitstate.environment import FakeExecutor
from gitstate.utils import create_logger


@pytest.fixture
def run_cli(config: Config, fake_executor: FakeExecutor) -> Iterator[Callable[..., int]]:
    """Run CLI tokens against the fake executor and return the exit code."""
    CLIContext.set_current(
        CLIContext(config=config, executor=fake_executor, logger=create_logger(level="error"))
    )
    app = create_app(
        console=Console(file=StringIO()),
        error_console=Console(file=StringIO()),
    )

    def _run(*tokens: str) -> int:
        try:
            app(list(tokens))
        except SystemExit as e:
            return int(e.code or 0)
        return 0

    yield _run
    CLIContext.reset()
