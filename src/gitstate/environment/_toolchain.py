"""Base execution context for running git.

Everything about how the context is assembled (credentials, host keys,
auxiliary tools) lives here, so the repository model only ever asks for "a
container ready to run git".
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import TYPE_CHECKING, Final

from gitstate.environment._container import Container, RemoteFile

if TYPE_CHECKING:
    from gitstate.config import Config
    from gitstate.environment._protocol import ExecutorProtocol

TOOLS_PATH: Final = "/gitstate/bin"
FILTER_REPO_PATH: Final = f"{TOOLS_PATH}/git-filter-repo"
SSH_KEY_PATH: Final = "/gitstate/ssh/id_key"
KNOWN_HOSTS_PATH: Final = "/gitstate/ssh/known_hosts"


def ssh_command(*, private_key: bool, known_hosts: bool) -> str:
    """Build the GIT_SSH_COMMAND value for the given credentials."""
    argv = ["ssh"]
    if private_key:
        argv += ["-i", SSH_KEY_PATH, "-o", "IdentitiesOnly=yes"]
    if known_hosts:
        argv += ["-o", f"UserKnownHostsFile={KNOWN_HOSTS_PATH}"]
    else:
        argv += ["-o", "StrictHostKeyChecking=accept-new"]
    return shlex.join(argv)


def build_container(
    executor: ExecutorProtocol,
    config: Config,
    *,
    filter_repo: bool = False,
) -> Container:
    """Assemble a container ready to run git.

    Args:
        executor: Runs the resulting plans.
        config: Supplies SSH credentials and the git-filter-repo pin.
        filter_repo: Install git-filter-repo. Ignored when the
            ``[filter_repo]`` section disables it. Installing downloads the
            script on first use, so plans that do not need it skip it.

    Returns:
        A container with credentials and tools in place and no commands.
    """
    container = Container(executor)

    private_key = config.ssh.private_key
    known_hosts = config.ssh.known_hosts
    if private_key:
        container = container.with_secret_file(
            SSH_KEY_PATH, Path(private_key).expanduser()
        )
    if known_hosts:
        container = container.with_secret_file(
            KNOWN_HOSTS_PATH, Path(known_hosts).expanduser()
        )
    container = container.with_env_variable(
        "GIT_SSH_COMMAND",
        ssh_command(private_key=bool(private_key), known_hosts=bool(known_hosts)),
        paths=True,
    )

    if filter_repo and config.filter_repo.enabled:
        container = container.with_file(
            FILTER_REPO_PATH,
            RemoteFile(config.filter_repo.resolved_url),
            permissions=0o755,
        ).with_env_variable("PATH", f"{TOOLS_PATH}:${{PATH}}", expand=True, paths=True)

    return container
