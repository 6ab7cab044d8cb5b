"""Git commands executed against a repository snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Self

if TYPE_CHECKING:
    from gitstate.environment import Container
    from gitstate.repository._repo import Repo

# Fixed environment locations. Every command mounts its snapshot here, so
# chained commands compose without callers naming paths.
STATE_PATH: Final = "/git/state"
WORKTREE_PATH: Final = "/git/worktree"
CLONE_PATH: Final = "/git/clone"
METADATA_DIR: Final = ".git"

# Subcommand served by the git-filter-repo script rather than git itself.
FILTER_REPO_COMMAND: Final = "filter-repo"


@dataclass(frozen=True, slots=True)
class GitCommand:
    """A git invocation bound to the snapshot it runs against.

    Constructing a command runs nothing. Each terminal method (stdout,
    stderr, sync, output) runs the process again; results are not cached.

    Attributes:
        args: The git subcommand and its arguments.
        input: The snapshot the command runs against.
    """

    args: tuple[str, ...]
    input: Repo

    def container(self) -> Container:
        """Build the plan: mount both trees, then run git against them."""
        repo = self.input
        return (
            repo.git.container(filter_repo=self.args[:1] == (FILTER_REPO_COMMAND,))
            .with_directory(STATE_PATH, repo.state)
            .with_directory(WORKTREE_PATH, repo.worktree)
            .with_exec(
                repo.git.argv(
                    f"--git-dir={STATE_PATH}",
                    f"--work-tree={WORKTREE_PATH}",
                    *self.args,
                ),
                paths=(1, 2),
            )
        )

    def stdout(self) -> str:
        """Run the command and return its standard output.

        Raises:
            ProcessError: If git exits non-zero.
        """
        return self.container().stdout()

    def stderr(self) -> str:
        """Run the command and return its standard error.

        Raises:
            ProcessError: If git exits non-zero.
        """
        return self.container().stderr()

    def sync(self) -> Self:
        """Run the command for its success or failure only.

        Raises:
            ProcessError: If git exits non-zero.
        """
        _ = self.container().sync()
        return self

    def output(self) -> Repo:
        """Run the command and return the snapshot it leaves behind.

        This is the only way a repository's state advances.

        Raises:
            ProcessError: If git exits non-zero.
        """
        state, worktree = self.container().directories(STATE_PATH, WORKTREE_PATH)
        return self.input.with_(state, worktree)
