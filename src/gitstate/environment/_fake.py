"""Fake executor for testing.

This module provides a FakeExecutor class that implements ExecutorProtocol
without starting processes. It keeps an in-memory filesystem of mounted
trees, answers commands from scripted rules, and records every plan it runs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from string import Template

from gitstate.environment._container import (
    DEFAULT_WORKDIR,
    Container,
    DirectoryStep,
    EnvStep,
    ExecOutput,
    ExecStep,
    FileStep,
    RemoteFile,
    SecretFileStep,
    WorkdirStep,
)
from gitstate.exceptions import ExecutorError, ProcessError
from gitstate.tree import Tree


@dataclass(slots=True)
class FakeProcess:
    """What a scripted command sees when it runs.

    Effects mutate ``mounts`` to simulate a command changing the environment's
    filesystem.

    Attributes:
        argv: The command being run.
        env: Variables set by the plan so far.
        workdir: The working directory.
        mounts: Trees currently placed in the environment, keyed by path.
    """

    argv: tuple[str, ...]
    env: dict[str, str]
    workdir: str
    mounts: dict[str, Tree]

    def tree(self, path: str) -> Tree:
        """Return the tree at path, looking inside enclosing mounts."""
        return _lookup(self.mounts, path)


type Effect = Callable[[FakeProcess], None]


@dataclass(frozen=True, slots=True)
class FakeRule:
    """A scripted response to commands containing ``match`` as a run of args."""

    match: tuple[str, ...]
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    effect: Effect | None = None

    def matches(self, argv: Sequence[str]) -> bool:
        """True if match occurs as a contiguous run within argv."""
        size = len(self.match)
        return any(
            tuple(argv[i : i + size]) == self.match
            for i in range(len(argv) - size + 1)
        )


def _lookup(mounts: dict[str, Tree], path: str) -> Tree:
    """Find the tree at path in the innermost enclosing mount."""
    for mount in sorted(mounts, key=len, reverse=True):
        if path == mount:
            return mounts[mount]
        if path.startswith(mount.rstrip("/") + "/"):
            rest = path[len(mount.rstrip("/")) + 1 :]
            try:
                return mounts[mount].directory(rest)
            except (FileNotFoundError, NotADirectoryError):
                break
    msg = f"No directory at {path} after running the plan"
    raise ExecutorError(msg)


@dataclass(slots=True)
class FakeExecutor:
    """Fake executor for testing.

    Rules are checked in the order they were added; the first whose match
    appears in a command's argv decides its output. Commands that match no
    rule succeed with empty output.

    Example:
        >>> executor = FakeExecutor()
        >>> executor.on("ls-remote", stdout="abc123\\trefs/tags/v1\\n")
        >>> Container(executor).with_exec(["git", "ls-remote", url]).stdout()
        'abc123\\trefs/tags/v1\\n'
        >>> executor.commands
        [('git', 'ls-remote', url)]

    Attributes:
        rules: Scripted responses, checked in order.
        runs: Every plan passed to run or terminal.
        files: Files placed by the most recent runs, keyed by path.
        remote_files: Contents served for RemoteFile URLs.
        terminal_exit_code: Exit status reported by terminal.
    """

    rules: list[FakeRule] = field(default_factory=list)
    runs: list[Container] = field(default_factory=list)
    files: dict[str, bytes] = field(default_factory=dict)
    remote_files: dict[str, bytes] = field(default_factory=dict)
    terminal_exit_code: int = 0

    def on(
        self,
        *match: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
        effect: Effect | None = None,
    ) -> None:
        """Script the response to commands containing the given args."""
        self.rules.append(FakeRule(match, stdout, stderr, exit_code, effect))

    @property
    def commands(self) -> list[tuple[str, ...]]:
        """Every command from every recorded run, in order."""
        return [argv for container in self.runs for argv in container.execs]

    # =========================================================================
    # ExecutorProtocol
    # =========================================================================

    def run(self, container: Container, *, capture: Sequence[str] = ()) -> ExecOutput:
        """Simulate a plan against the in-memory filesystem.

        Raises:
            ProcessError: If a scripted rule has a non-zero exit code.
            ExecutorError: If a captured path does not exist.
        """
        self.runs.append(container)
        mounts: dict[str, Tree] = {}
        env: dict[str, str] = {}
        workdir = DEFAULT_WORKDIR
        stdout = stderr = ""

        for step in container.steps:
            match step:
                case DirectoryStep(path=path, tree=tree):
                    for existing in [m for m in mounts if m.startswith(path + "/")]:
                        del mounts[existing]
                    mounts[path] = tree
                case FileStep(path=path, source=source):
                    data = (
                        self.remote_files.get(source.url, b"")
                        if isinstance(source, RemoteFile)
                        else source
                    )
                    self.files[path] = data
                case SecretFileStep(path=path):
                    self.files[path] = b""
                case EnvStep(name=name, value=value, expand=expand):
                    env[name] = Template(value).safe_substitute(env) if expand else value
                case WorkdirStep(path=path):
                    workdir = path
                    mounts.setdefault(path, Tree())
                case ExecStep(argv=argv):
                    stdout, stderr = self._exec(FakeProcess(argv, env, workdir, mounts))

        directories = {path: _lookup(mounts, path) for path in capture}
        return ExecOutput(stdout=stdout, stderr=stderr, directories=directories)

    def terminal(self, container: Container, *, shell: str | None = None) -> int:
        """Run the plan, then report the scripted shell exit code."""
        _ = self.run(container)
        return self.terminal_exit_code

    def _exec(self, process: FakeProcess) -> tuple[str, str]:
        for rule in self.rules:
            if not rule.matches(process.argv):
                continue
            if rule.exit_code != 0:
                msg = (
                    f"Command exited with status {rule.exit_code}: "
                    f"{' '.join(process.argv)}"
                )
                raise ProcessError(
                    msg,
                    argv=process.argv,
                    exit_code=rule.exit_code,
                    stdout=rule.stdout,
                    stderr=rule.stderr,
                )
            if rule.effect is not None:
                rule.effect(process)
            return rule.stdout, rule.stderr
        return "", ""
