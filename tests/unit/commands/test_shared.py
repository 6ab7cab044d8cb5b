# pyright: reportExplicitAny=false
"""Unit tests for the shared CLI utilities module."""

from io import StringIO
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from gitstate.cli._commands._context import CLIContext
from gitstate.cli._commands._shared import (
    ExitCode,
    exit_with_error,
    format_json,
    format_table,
    get_error_console,
    get_git,
    handle_errors,
    load_repo,
    prepare_output,
)
from gitstate.config import Config
from gitstate.environment import FakeExecutor
from gitstate.exceptions import (
    ConfigLoadError,
    ExecutorError,
    FetchError,
    GitStateError,
    InvalidFilterError,
    LoadError,
    ProcessError,
    RefNotFoundError,
    TreePathError,
)


class TestExitCode:
    def test_exit_code_values_are_unique(self) -> None:
        values = [code.value for code in ExitCode]
        assert len(values) == len(set(values))

    def test_exit_code_values(self) -> None:
        assert ExitCode.SUCCESS == 0
        assert ExitCode.LOAD_ERROR == 1
        assert ExitCode.VALIDATION_ERROR == 2
        assert ExitCode.NOT_FOUND == 3
        assert ExitCode.PROCESS_ERROR == 4
        assert ExitCode.INTERNAL_ERROR == 5


class TestFormatJson:
    def test_format_empty_list(self) -> None:
        assert format_json([]) == "[]"

    def test_format_ref_records(self) -> None:
        data: list[dict[str, Any]] = [{"name": "v1.0", "commit_id": "abc"}]

        result = format_json(data)

        assert '"name": "v1.0"' in result
        assert "\n" in result

    def test_format_without_indent(self) -> None:
        result = format_json({"key": "value", "nested": {"inner": "data"}}, indent=False)

        assert result == '{"key":"value","nested":{"inner":"data"}}'


class TestFormatTable:
    def test_markdown_table(self) -> None:
        result = format_table(["Name", "Commit"], [["main", "abc123"]])

        lines = result.strip().splitlines()
        assert "Name" in lines[0]
        assert "Commit" in lines[0]
        assert "main" in lines[2]
        assert "abc123" in lines[2]


class TestExitWithError:
    def test_prints_and_exits(self) -> None:
        output = StringIO()
        console = Console(file=output, force_terminal=False)

        with pytest.raises(SystemExit) as exc_info:
            exit_with_error("boom", ExitCode.NOT_FOUND, console=console)

        assert exc_info.value.code == ExitCode.NOT_FOUND
        assert "Error: boom" in output.getvalue()

    def test_markup_in_message_is_escaped(self) -> None:
        output = StringIO()
        console = Console(file=output, force_terminal=False)

        with pytest.raises(SystemExit):
            exit_with_error("bad ref [bold]x[/bold]", console=console)

        assert "[bold]x[/bold]" in output.getvalue()

    def test_error_console_targets_stderr(self) -> None:
        assert get_error_console().stderr


class TestHandleErrors:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (LoadError("no repo"), ExitCode.LOAD_ERROR),
            (ConfigLoadError("bad toml"), ExitCode.LOAD_ERROR),
            (InvalidFilterError("bad regex", pattern="("), ExitCode.VALIDATION_ERROR),
            (TreePathError("escapes", path="../x"), ExitCode.VALIDATION_ERROR),
            (RefNotFoundError("missing", url="u", name="v", kind="tag"), ExitCode.NOT_FOUND),
            (ProcessError("failed", argv=["git"], exit_code=128), ExitCode.PROCESS_ERROR),
            (ExecutorError("no git"), ExitCode.PROCESS_ERROR),
            (FetchError("offline", url="https://x"), ExitCode.PROCESS_ERROR),
            (GitStateError("other"), ExitCode.INTERNAL_ERROR),
        ],
    )
    def test_maps_errors_to_exit_codes(self, error: GitStateError, code: ExitCode) -> None:
        console = Console(file=StringIO())

        with pytest.raises(SystemExit) as exc_info, handle_errors(console=console):
            raise error

        assert exc_info.value.code == code

    def test_other_exceptions_propagate(self) -> None:
        with pytest.raises(KeyError), handle_errors(console=Console(file=StringIO())):
            raise KeyError("x")

    def test_no_error_no_exit(self) -> None:
        with handle_errors():
            pass


class TestGetGit:
    def test_uses_context_executor(self, fake_executor: FakeExecutor) -> None:
        config = Config.from_dict({"environment": {"git_binary": "git2"}})
        CLIContext.set_current(CLIContext(config=config, executor=fake_executor))
        try:
            git = get_git()
        finally:
            CLIContext.reset()

        assert git.executor is fake_executor
        assert git.config is config


class TestLoadRepo:
    def test_missing_source_raises_load_error(self, tmp_path: Path, fake_executor: FakeExecutor) -> None:
        from gitstate.repository import Git

        with pytest.raises(LoadError, match="Not a directory"):
            load_repo(Git(Config(), executor=fake_executor), tmp_path / "missing")


class TestPrepareOutput:
    def test_new_directory_is_accepted(self, tmp_path: Path) -> None:
        prepare_output(tmp_path / "new")

    def test_empty_directory_is_accepted(self, repo_dir: Path) -> None:
        prepare_output(repo_dir)

    def test_non_empty_directory_is_rejected(self, repo_dir: Path) -> None:
        (repo_dir / "file.txt").write_text("x")

        with pytest.raises(SystemExit) as exc_info:
            prepare_output(repo_dir)

        assert exc_info.value.code == ExitCode.VALIDATION_ERROR

    def test_file_is_rejected(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("x")

        with pytest.raises(SystemExit):
            prepare_output(target)
