"""Executor protocol for type-safe dependency injection.

Both LocalExecutor and FakeExecutor satisfy this protocol, so the repository
model never depends on how a plan is actually run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gitstate.environment._container import Container, ExecOutput


@runtime_checkable
class ExecutorProtocol(Protocol):
    """Protocol for running Container plans.

    Example:
        >>> def list_files(executor: ExecutorProtocol, tree: Tree) -> str:
        ...     container = Container(executor).with_directory("/src", tree)
        ...     return container.with_exec(["ls", "/src"], paths=(1,)).stdout()
    """

    def run(self, container: Container, *, capture: Sequence[str] = ()) -> ExecOutput:
        """Run every step of a plan in a fresh environment.

        Args:
            container: The plan to run.
            capture: Absolute environment paths whose trees to return.

        Returns:
            Output of the last exec step and the captured trees.

        Raises:
            ProcessError: If a command exits non-zero. Later steps do not run.
            ExecutorError: If the plan cannot be carried out, or a captured
                path does not exist.
        """
        ...

    def terminal(self, container: Container, *, shell: str | None = None) -> int:
        """Run a plan, then attach an interactive shell to its environment.

        Args:
            container: The plan to run before the shell starts.
            shell: Shell executable; the executor's default when None.

        Returns:
            The shell's exit status.
        """
        ...
