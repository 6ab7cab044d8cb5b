"""Local subprocess executor.

Runs Container plans on the host. Each run gets a fresh scratch directory
that stands in for the environment's filesystem root: the environment path
``/git/state`` lives at ``<scratch>/git/state``. Arguments and variables the
plan marks as naming environment paths are rewritten to their scratch
locations; everything else reaches the process verbatim.
"""

from __future__ import annotations

import hashlib
import os
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from string import Template
from typing import TYPE_CHECKING, Final

import platformdirs
import requests

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
    Step,
    WorkdirStep,
)
from gitstate.exceptions import ExecutorError, FetchError, ProcessError
from gitstate.tree import read_tree, write_tree
from gitstate.utils import create_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structlog.typing import FilteringBoundLogger

    from gitstate.config import Config
    from gitstate.tree import Tree

DOWNLOAD_TIMEOUT_SECONDS: Final = 30


def _mount_roots(steps: Sequence[Step]) -> tuple[str, ...]:
    """Environment paths the plan provides, longest first."""
    roots: set[str] = set()
    for step in steps:
        match step:
            case DirectoryStep(path=path) | WorkdirStep(path=path):
                roots.add(path)
            case FileStep(path=path) | SecretFileStep(path=path):
                roots.add(path)
                roots.add(PurePosixPath(path).parent.as_posix())
            case _:
                pass
    roots.discard(DEFAULT_WORKDIR)
    return tuple(sorted(roots, key=lambda root: (-len(root), root)))


@dataclass(slots=True)
class _Sandbox:
    """Host-side state for a single plan run."""

    root: Path
    roots: tuple[str, ...]
    env: dict[str, str]
    workdir: str = DEFAULT_WORKDIR
    stdout: str = ""
    stderr: str = ""
    _pattern: re.Pattern[str] | None = field(default=None, init=False)

    def host(self, path: str) -> Path:
        """Map an absolute environment path to its scratch location."""
        return self.root / path.lstrip("/")

    def rewrite(self, value: str) -> str:
        """Replace mounted environment paths in value with host paths."""
        if not self.roots:
            return value
        if self._pattern is None:
            alternatives = "|".join(re.escape(r) for r in self.roots)
            self._pattern = re.compile(rf"(?<![\w./-])({alternatives})(?![\w.-])")
        return self._pattern.sub(lambda m: str(self.host(m.group(1))), value)


@dataclass(slots=True)
class LocalExecutor:
    """Run Container plans as host processes in scratch directories.

    Implements ExecutorProtocol. Remote files are downloaded once and kept
    in a cache directory keyed by URL.

    Attributes:
        cache_dir: Where downloaded files are kept.
        timeout_seconds: Per-process timeout, or None for no limit.
        shell: Default shell for interactive sessions.
        logger: Structured logger for exec events.
    """

    cache_dir: Path = field(
        default_factory=lambda: Path(platformdirs.user_cache_dir("gitstate"))
    )
    timeout_seconds: float | None = None
    shell: str = "/bin/sh"
    logger: FilteringBoundLogger = field(default_factory=create_logger, repr=False)
    session: requests.Session = field(default_factory=requests.Session, repr=False)

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> LocalExecutor:
        """Build an executor from the ``[environment]`` config section."""
        environment = config.environment
        if logger is None:
            logger = create_logger(
                level=config.logging.level.value,
                log_format=config.logging.format.value,  # type: ignore[arg-type]
                log_file=config.logging.file,
            )
        cache_dir = (
            Path(environment.cache_dir).expanduser()
            if environment.cache_dir
            else Path(platformdirs.user_cache_dir("gitstate"))
        )
        return cls(
            cache_dir=cache_dir,
            timeout_seconds=environment.timeout_seconds,
            shell=environment.shell,
            logger=logger,
        )

    # =========================================================================
    # ExecutorProtocol
    # =========================================================================

    def run(self, container: Container, *, capture: Sequence[str] = ()) -> ExecOutput:
        """Run every step of a plan in a fresh scratch directory.

        Raises:
            ProcessError: If a command exits non-zero.
            ExecutorError: If a command cannot be started or times out, or a
                captured path does not exist.
            FetchError: If a remote file cannot be downloaded.
        """
        with tempfile.TemporaryDirectory(prefix="gitstate-") as scratch:
            sandbox = self._prepare(Path(scratch), container)
            for step in container.steps:
                self._apply(sandbox, step)
            directories = {path: self._capture(sandbox, path) for path in capture}
            return ExecOutput(
                stdout=sandbox.stdout,
                stderr=sandbox.stderr,
                directories=directories,
            )

    def terminal(self, container: Container, *, shell: str | None = None) -> int:
        """Run a plan, then attach an interactive shell in its workdir.

        Raises:
            ProcessError: If a plan command exits non-zero.
            ExecutorError: If the shell cannot be started.
        """
        shell = shell or self.shell
        with tempfile.TemporaryDirectory(prefix="gitstate-") as scratch:
            sandbox = self._prepare(Path(scratch), container)
            for step in container.steps:
                self._apply(sandbox, step)
            self.logger.debug("terminal_started", shell=shell, workdir=sandbox.workdir)
            try:
                result = subprocess.run(  # noqa: S603
                    [shell],
                    cwd=sandbox.host(sandbox.workdir),
                    env=sandbox.env,
                    check=False,
                )
            except FileNotFoundError as e:
                msg = f"Shell not found: {shell}"
                raise ExecutorError(msg) from e
            return result.returncode

    # =========================================================================
    # Step Handling
    # =========================================================================

    def _prepare(self, root: Path, container: Container) -> _Sandbox:
        sandbox = _Sandbox(
            root=root,
            roots=_mount_roots(container.steps),
            env=dict(os.environ),
        )
        sandbox.host(DEFAULT_WORKDIR).mkdir(parents=True, exist_ok=True)
        return sandbox

    def _apply(self, sandbox: _Sandbox, step: Step) -> None:
        match step:
            case DirectoryStep(path=path, tree=tree):
                target = sandbox.host(path)
                if target.exists():
                    shutil.rmtree(target)
                write_tree(tree, target)
            case FileStep(path=path, source=source, permissions=permissions):
                data = self._fetch(source) if isinstance(source, RemoteFile) else source
                target = sandbox.host(path)
                target.parent.mkdir(parents=True, exist_ok=True)
                _ = target.write_bytes(data)
                target.chmod(permissions)
            case SecretFileStep(path=path, source=source, permissions=permissions):
                target = sandbox.host(path)
                target.parent.mkdir(parents=True, exist_ok=True)
                try:
                    _ = shutil.copyfile(source, target)
                except OSError as e:
                    msg = f"Cannot read secret file: {source}"
                    raise ExecutorError(msg) from e
                target.chmod(permissions)
            case EnvStep(name=name, value=value, expand=expand, paths=paths):
                if paths:
                    value = sandbox.rewrite(value)
                if expand:
                    value = Template(value).safe_substitute(sandbox.env)
                sandbox.env[name] = value
            case WorkdirStep(path=path):
                sandbox.workdir = path
                sandbox.host(path).mkdir(parents=True, exist_ok=True)
            case ExecStep(argv=argv, paths=paths):
                self._exec(sandbox, argv, paths)

    def _exec(self, sandbox: _Sandbox, argv: tuple[str, ...], paths: frozenset[int]) -> None:
        host_argv = [
            sandbox.rewrite(arg) if index in paths else arg
            for index, arg in enumerate(argv)
        ]
        self.logger.debug("exec_started", argv=list(argv), workdir=sandbox.workdir)
        try:
            result = subprocess.run(  # noqa: S603
                host_argv,
                cwd=sandbox.host(sandbox.workdir),
                env=sandbox.env,
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as e:
            msg = f"Executable not found: {argv[0]}"
            raise ExecutorError(msg) from e
        except subprocess.TimeoutExpired as e:
            msg = f"Command timed out after {self.timeout_seconds}s: {' '.join(argv)}"
            raise ExecutorError(msg) from e

        # Report environment paths, not scratch paths.
        stdout = self._unrewrite(sandbox, result.stdout.decode("utf-8", errors="replace"))
        stderr = self._unrewrite(sandbox, result.stderr.decode("utf-8", errors="replace"))

        if result.returncode != 0:
            self.logger.warning(
                "exec_failed",
                argv=list(argv),
                exit_code=result.returncode,
                stderr=stderr.strip(),
            )
            msg = f"Command exited with status {result.returncode}: {' '.join(argv)}"
            raise ProcessError(
                msg,
                argv=argv,
                exit_code=result.returncode,
                stdout=stdout,
                stderr=stderr,
            )

        self.logger.debug("exec_finished", argv=list(argv), exit_code=0)
        sandbox.stdout = stdout
        sandbox.stderr = stderr

    @staticmethod
    def _unrewrite(sandbox: _Sandbox, text: str) -> str:
        return text.replace(str(sandbox.root), "") if text else text

    def _capture(self, sandbox: _Sandbox, path: str) -> Tree:
        host_path = sandbox.host(path)
        if not host_path.is_dir():
            msg = f"No directory at {path} after running the plan"
            raise ExecutorError(msg)
        return read_tree(host_path)

    # =========================================================================
    # Remote Files
    # =========================================================================

    def _fetch(self, remote: RemoteFile) -> bytes:
        """Return the contents of a remote file, downloading it at most once."""
        key = hashlib.sha256(remote.url.encode("utf-8")).hexdigest()
        cached = self.cache_dir / "files" / key
        if cached.is_file():
            return cached.read_bytes()

        self.logger.info("remote_file_fetching", url=remote.url)
        try:
            response = self.session.get(remote.url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.RequestException as e:
            msg = f"Failed to download {remote.url}: {e}"
            raise FetchError(msg, url=remote.url) from e

        data = response.content
        # Each writer gets its own partial file; the rename publishes it whole.
        cached.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=cached.parent, prefix=f"{key}.", suffix=".partial", delete=False
        ) as partial:
            _ = partial.write(data)
        os.replace(partial.name, cached)
        return data
