"""Shared test fixtures for gitstate tests."""

import os
from pathlib import Path

import pytest

from gitstate.config import Config
from gitstate.environment import FakeExecutor
from gitstate.repository import Git
from gitstate.utils import create_logger


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep user config files and GITSTATE_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("GITSTATE_"):
            monkeypatch.delenv(key)
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / "cache"))


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def config() -> Config:
    """Default configuration with no files or environment applied."""
    return Config.from_dict({})


@pytest.fixture
def git(config: Config, fake_executor: FakeExecutor) -> Git:
    """A Git client whose plans run on the fake executor."""
    return Git(config, executor=fake_executor, logger=create_logger(level="error"))


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """An empty directory for writing repositories to."""
    path = tmp_path / "repo"
    path.mkdir()
    return path
