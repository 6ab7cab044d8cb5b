"""Execution environments for running git against immutable trees.

Classes:
    Container: An immutable, lazily executed plan of steps.
    RemoteFile: A file the executor downloads by URL.
    ExecOutput: Captured output and trees from one run.
    ExecutorProtocol: Runtime-checkable protocol for executors.
    LocalExecutor: Runs plans as host processes in scratch directories.
    FakeExecutor: In-memory executor for tests.

Functions:
    build_container: Assemble the base git toolchain context.
"""

from gitstate.environment._container import (
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
    sandbox_path,
)
from gitstate.environment._fake import FakeExecutor, FakeProcess, FakeRule
from gitstate.environment._local import LocalExecutor
from gitstate.environment._protocol import ExecutorProtocol
from gitstate.environment._toolchain import (
    FILTER_REPO_PATH,
    KNOWN_HOSTS_PATH,
    SSH_KEY_PATH,
    TOOLS_PATH,
    build_container,
    ssh_command,
)

__all__ = [
    "FILTER_REPO_PATH",
    "KNOWN_HOSTS_PATH",
    "SSH_KEY_PATH",
    "TOOLS_PATH",
    "Container",
    "DirectoryStep",
    "EnvStep",
    "ExecOutput",
    "ExecStep",
    "ExecutorProtocol",
    "FakeExecutor",
    "FakeProcess",
    "FakeRule",
    "FileStep",
    "LocalExecutor",
    "RemoteFile",
    "SecretFileStep",
    "Step",
    "WorkdirStep",
    "build_container",
    "ssh_command",
    "sandbox_path",
]
