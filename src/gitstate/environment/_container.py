# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Immutable execution plans.

A Container records what an execution environment should do: which trees to
place where, which files and variables to provide, and which commands to
run. Nothing happens until a terminal method (stdout, stderr, sync,
directory, directories, terminal) hands the plan to the executor, and every
terminal call runs the whole plan again from scratch.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final, Self

from gitstate.exceptions import ExecutorError
from gitstate.tree import Tree

if TYPE_CHECKING:
    from gitstate.environment._protocol import ExecutorProtocol

DEFAULT_WORKDIR: Final = "/"


def sandbox_path(path: str, *, workdir: str = DEFAULT_WORKDIR) -> str:
    """Resolve a path inside the execution environment.

    Args:
        path: An absolute path, or a path relative to workdir.
        workdir: The working directory relative paths resolve against.

    Returns:
        The normalized absolute path.

    Raises:
        ExecutorError: If the path contains "..".
    """
    pure = PurePosixPath(workdir) / path
    if ".." in pure.parts:
        msg = f"Environment paths must not contain '..': {path}"
        raise ExecutorError(msg)
    return pure.as_posix()


@dataclass(frozen=True, slots=True)
class RemoteFile:
    """A file the executor downloads by URL.

    Attributes:
        url: Where to fetch the contents from. Should be pinned to an
            immutable revision.
    """

    url: str


@dataclass(frozen=True, slots=True)
class DirectoryStep:
    """Place a tree at a path, replacing anything already there."""

    path: str
    tree: Tree


@dataclass(frozen=True, slots=True)
class FileStep:
    """Place a file at a path with the given permissions."""

    path: str
    source: bytes | RemoteFile
    permissions: int = 0o644


@dataclass(frozen=True, slots=True)
class SecretFileStep:
    """Copy a host file into the environment without recording its contents.

    The host file is read when the plan runs, so secrets never live in the
    plan itself.
    """

    path: str
    source: Path = field(repr=False)
    permissions: int = 0o600


@dataclass(frozen=True, slots=True)
class EnvStep:
    """Set an environment variable for subsequent exec steps.

    When expand is set, ``$NAME`` and ``${NAME}`` references are substituted
    from the environment at that point in the plan. When paths is set, the
    value names environment paths, and executors that relocate the
    environment on the host translate them.
    """

    name: str
    value: str
    expand: bool = False
    paths: bool = False


@dataclass(frozen=True, slots=True)
class WorkdirStep:
    """Change the working directory for subsequent steps."""

    path: str


@dataclass(frozen=True, slots=True)
class ExecStep:
    """Run a command.

    Attributes:
        argv: The program and its arguments.
        paths: Indexes of the arguments that name environment paths. All
            other arguments are passed through verbatim.
    """

    argv: tuple[str, ...]
    paths: frozenset[int] = frozenset()


type Step = DirectoryStep | FileStep | SecretFileStep | EnvStep | WorkdirStep | ExecStep


@dataclass(frozen=True, slots=True)
class ExecOutput:
    """Result of running a plan.

    Attributes:
        stdout: Standard output of the last exec step.
        stderr: Standard error of the last exec step.
        directories: Trees captured after the run, keyed by absolute
            environment path.
    """

    stdout: str = ""
    stderr: str = ""
    directories: dict[str, Tree] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Container:
    """An immutable, lazily executed plan bound to an executor.

    Builder methods return new containers; the receiver is never changed, so
    a container can be shared and extended along independent branches.

    Example:
        >>> base = Container(executor).with_directory("/src", tree)
        >>> listing = base.with_workdir("/src").with_exec(["ls"]).stdout()
    """

    executor: ExecutorProtocol = field(repr=False, compare=False)
    steps: tuple[Step, ...] = ()

    # =========================================================================
    # Plan Inspection
    # =========================================================================

    @property
    def workdir(self) -> str:
        """The working directory in effect after the last step."""
        for step in reversed(self.steps):
            if isinstance(step, WorkdirStep):
                return step.path
        return DEFAULT_WORKDIR

    @property
    def execs(self) -> tuple[tuple[str, ...], ...]:
        """The argv of every exec step, in order."""
        return tuple(step.argv for step in self.steps if isinstance(step, ExecStep))

    def _resolve(self, path: str) -> str:
        return sandbox_path(path, workdir=self.workdir)

    def _with(self, step: Step) -> Self:
        return replace(self, steps=(*self.steps, step))

    # =========================================================================
    # Builders
    # =========================================================================

    def with_directory(self, path: str, tree: Tree) -> Self:
        """Place a tree at path."""
        return self._with(DirectoryStep(self._resolve(path), tree))

    def with_file(
        self,
        path: str,
        source: bytes | RemoteFile,
        *,
        permissions: int = 0o644,
    ) -> Self:
        """Place a file at path, from literal contents or a URL."""
        return self._with(FileStep(self._resolve(path), source, permissions))

    def with_secret_file(self, path: str, source: Path) -> Self:
        """Copy a host file to path, readable only by its owner."""
        return self._with(SecretFileStep(self._resolve(path), source))

    def with_env_variable(
        self,
        name: str,
        value: str,
        *,
        expand: bool = False,
        paths: bool = False,
    ) -> Self:
        """Set an environment variable for later exec steps.

        Args:
            name: Variable name.
            value: Variable value.
            expand: Substitute ``$NAME`` references when the plan runs.
            paths: The value names environment paths.
        """
        return self._with(EnvStep(name, value, expand, paths))

    def with_workdir(self, path: str) -> Self:
        """Set the working directory for later steps."""
        return self._with(WorkdirStep(self._resolve(path)))

    def with_exec(self, argv: Sequence[str], *, paths: Iterable[int] = ()) -> Self:
        """Append a command to run.

        Args:
            argv: The program and its arguments, passed through verbatim.
            paths: Indexes into argv of arguments that name environment
                paths, such as ``--git-dir=/git/state``.

        Raises:
            ExecutorError: If argv is empty or a path index is out of range.
        """
        if not argv:
            msg = "Cannot execute an empty command"
            raise ExecutorError(msg)
        marked = frozenset(paths)
        if any(not 0 <= index < len(argv) for index in marked):
            msg = f"Path index out of range for {len(argv)} arguments: {sorted(marked)}"
            raise ExecutorError(msg)
        return self._with(ExecStep(tuple(argv), marked))

    # =========================================================================
    # Terminal Operations
    # =========================================================================

    def stdout(self) -> str:
        """Run the plan and return the last command's standard output.

        Raises:
            ProcessError: If any command exits non-zero.
        """
        return self.executor.run(self).stdout

    def stderr(self) -> str:
        """Run the plan and return the last command's standard error.

        Raises:
            ProcessError: If any command exits non-zero.
        """
        return self.executor.run(self).stderr

    def sync(self) -> Self:
        """Run the plan for its side effects and failure signal.

        Returns:
            This container, unchanged.

        Raises:
            ProcessError: If any command exits non-zero.
        """
        _ = self.executor.run(self)
        return self

    def directory(self, path: str) -> Tree:
        """Run the plan and return the tree left at path."""
        (tree,) = self.directories(path)
        return tree

    def directories(self, *paths: str) -> tuple[Tree, ...]:
        """Run the plan once and return the trees left at each path.

        Raises:
            ProcessError: If any command exits non-zero.
            ExecutorError: If a path does not exist after the run.
        """
        resolved = tuple(self._resolve(p) for p in paths)
        output = self.executor.run(self, capture=resolved)
        return tuple(output.directories[p] for p in resolved)

    def terminal(self, *, shell: str | None = None) -> int:
        """Run the plan, then open an interactive shell in its environment.

        Returns:
            The shell's exit status.
        """
        return self.executor.terminal(self, shell=shell)
