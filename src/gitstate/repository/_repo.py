"""Immutable repository snapshots."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Self

from gitstate.repository._command import (
    FILTER_REPO_COMMAND,
    METADATA_DIR,
    STATE_PATH,
    WORKTREE_PATH,
    GitCommand,
)
from gitstate.repository._refs import Commit, Tag
from gitstate.tree import write_tree

if TYPE_CHECKING:
    from pathlib import Path

    from gitstate.repository._git import Git
    from gitstate.tree import Tree


@dataclass(frozen=True, slots=True)
class Repo:
    """A git repository as a pair of immutable trees.

    ``state`` holds what normally lives in ``.git`` (objects, refs, config)
    and ``worktree`` holds the checked-out files. Every operation that runs
    git returns a new Repo; the receiver is never changed, so snapshots can
    be kept, compared and used from several threads at once.

    Example:
        >>> repo = Git().clone("https://github.com/octocat/Hello-World.git")
        >>> readme = repo.checkout("master").worktree.file("README")

    Attributes:
        state: The git metadata tree.
        worktree: The checked-out files.
        git: The client whose environment runs this snapshot's commands.
    """

    state: Tree
    worktree: Tree
    git: Git = field(repr=False, compare=False)

    # =========================================================================
    # Snapshot Construction
    # =========================================================================

    def with_state(self, state: Tree) -> Self:
        """Return a snapshot with a different state tree."""
        return replace(self, state=state)

    def with_worktree(self, worktree: Tree) -> Self:
        """Return a snapshot with a different worktree."""
        return replace(self, worktree=worktree)

    def with_(self, state: Tree, worktree: Tree) -> Self:
        """Return a snapshot with both trees replaced."""
        return replace(self, state=state, worktree=worktree)

    def directory(self) -> Tree:
        """Combine worktree and state, with the state nested as ``.git``.

        This is the inverse of Git.load on a combined directory.
        """
        return self.worktree.with_directory(METADATA_DIR, self.state)

    def export(self, path: Path) -> None:
        """Write the combined directory to disk."""
        write_tree(self.directory(), path)

    # =========================================================================
    # Commands
    # =========================================================================

    def command(self, args: Sequence[str]) -> GitCommand:
        """Bind a git command to this snapshot without running it."""
        return GitCommand(tuple(args), self)

    def with_command(self, args: Sequence[str]) -> Repo:
        """Run a git command and return the snapshot it produces.

        Raises:
            ProcessError: If git exits non-zero.
        """
        return self.command(args).output()

    def checkout(self, ref: str) -> Repo:
        """Check out ref into the worktree."""
        return self.with_command(["checkout", ref])

    def with_remote(self, name: str, url: str) -> Repo:
        """Add a remote.

        Raises:
            ProcessError: If a remote with that name already exists.
        """
        return self.with_command(["remote", "add", name, url])

    def filter_subdirectory(self, path: str) -> Repo:
        """Rewrite history so that path becomes the repository root."""
        return self.with_command(
            [FILTER_REPO_COMMAND, "--force", "--subdirectory-filter", path]
        )

    def filter_to_subdirectory(self, path: str) -> Repo:
        """Rewrite history so that the whole repository moves under path."""
        return self.with_command(
            [FILTER_REPO_COMMAND, "--force", "--to-subdirectory-filter", path]
        )

    # =========================================================================
    # Refs
    # =========================================================================

    def tag(self, name: str) -> Tag:
        """Return a lazy descriptor for a tag in this snapshot."""
        return Tag(name, self)

    def commit(self, digest: str) -> Commit:
        """Return a lazy descriptor for a commit in this snapshot."""
        return Commit(digest, self)

    # =========================================================================
    # Interactive
    # =========================================================================

    def terminal(self) -> int:
        """Open an interactive shell with this snapshot mounted.

        ``GIT_DIR`` and ``GIT_WORK_TREE`` are exported and the shell starts in
        the worktree. Changes made in the shell are discarded.

        Returns:
            The shell's exit status.
        """
        return (
            self.git.container()
            .with_directory(STATE_PATH, self.state)
            .with_directory(WORKTREE_PATH, self.worktree)
            .with_env_variable("GIT_DIR", STATE_PATH, paths=True)
            .with_env_variable("GIT_WORK_TREE", WORKTREE_PATH, paths=True)
            .with_workdir(WORKTREE_PATH)
            .terminal(shell=self.git.config.environment.shell)
        )
