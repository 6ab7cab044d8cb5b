from pathlib import Path

import pytest

from gitstate.environment import FakeProcess
from gitstate.repository import STATE_PATH, WORKTREE_PATH
from gitstate.tree import Tree


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


BARE_STATE = (
    Tree.from_files(
        {
            "HEAD": b"ref: refs/heads/main\n",
            "config": b"[core]\n\tbare = true\n",
            "description": b"Unnamed repository\n",
        }
    )
    .with_directory("objects", Tree())
    .with_directory("refs/heads", Tree())
    .with_directory("refs/tags", Tree())
)


@pytest.fixture
def bare_state() -> Tree:
    """A tree shaped like the output of ``git init --bare``."""
    return BARE_STATE


@pytest.fixture
def init_effect():
    """Effect that fills the state mount the way ``git init --bare`` would."""

    def _effect(process: FakeProcess) -> None:
        process.mounts[STATE_PATH] = BARE_STATE

    return _effect


@pytest.fixture
def checkout_effect():
    """Return a factory for effects that replace the worktree mount."""

    def _make(worktree: Tree):
        def _effect(process: FakeProcess) -> None:
            process.mounts[WORKTREE_PATH] = worktree

        return _effect

    return _make
