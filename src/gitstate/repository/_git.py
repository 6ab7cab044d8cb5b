"""Entry point for building repository snapshots."""

from __future__ import annotations

from time import time_ns
from typing import TYPE_CHECKING

from gitstate.config import Config
from gitstate.environment import LocalExecutor, build_container
from gitstate.exceptions import LoadError
from gitstate.repository._command import CLONE_PATH, METADATA_DIR, STATE_PATH
from gitstate.repository._remote import Remote
from gitstate.repository._repo import Repo
from gitstate.tree import Tree, read_tree
from gitstate.utils import create_logger

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from gitstate.environment import Container, ExecutorProtocol

CACHE_BUSTER_ENV = "GITSTATE_CACHE_BUSTER"

# Scratch directory name, relative to CLONE_PATH, that clones are written to.
_CLONE_DIR = "src"


class Git:
    """Creates repository snapshots and remote handles.

    A Git holds the configuration and executor that every snapshot derived
    from it uses. It carries no repository state itself and can be shared
    freely.

    Example:
        >>> git = Git()
        >>> repo = git.init()
        >>> repo.directory().entries()
        ('.git',)

    Attributes:
        config: Settings for the execution environment.
        executor: Runs the plans built by this client and its snapshots.
        logger: Structured logger for repository events.
    """

    __slots__: tuple[str, ...] = ("config", "executor", "logger")

    def __init__(
        self,
        config: Config | None = None,
        executor: ExecutorProtocol | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Configuration to use. Loaded from files and the
                environment when not given.
            executor: Executor for all plans. Defaults to a LocalExecutor
                built from config.
            logger: Logger for repository events. Defaults to one built from
                the ``[logging]`` section.

        Raises:
            ConfigError: If config is not given and cannot be loaded.
        """
        if config is None:
            config = Config.load()
        if logger is None:
            logger = create_logger(
                level=config.logging.level.value,
                log_format=config.logging.format.value,  # type: ignore[arg-type]
                log_file=config.logging.file,
            )
        if executor is None:
            executor = LocalExecutor.from_config(config, logger=logger)
        self.config: Config = config
        self.executor: ExecutorProtocol = executor
        self.logger: FilteringBoundLogger = logger

    def __repr__(self) -> str:
        return f"Git(executor={type(self.executor).__name__})"

    # =========================================================================
    # Environment
    # =========================================================================

    def container(self, *, filter_repo: bool = False) -> Container:
        """Return a fresh container with the git toolchain in place.

        Args:
            filter_repo: Also install git-filter-repo, when the
                ``[filter_repo]`` section enables it.
        """
        return build_container(self.executor, self.config, filter_repo=filter_repo)

    def argv(self, *args: str) -> tuple[str, ...]:
        """Prefix args with the configured git executable."""
        return (self.config.environment.git_binary, *args)

    # =========================================================================
    # Snapshot Construction
    # =========================================================================

    def init(self) -> Repo:
        """Create a snapshot holding a freshly initialised bare repository.

        Returns:
            A snapshot whose worktree is empty.

        Raises:
            ProcessError: If ``git init`` fails.
        """
        state = (
            self.container()
            .with_directory(STATE_PATH, Tree.empty())
            .with_exec(
                self.argv(f"--git-dir={STATE_PATH}", "init", "--quiet", "--bare"),
                paths=(1,),
            )
            .directory(STATE_PATH)
        )
        return Repo(state, Tree.empty(), self)

    def load(self, source: Tree, worktree: Tree | None = None) -> Repo:
        """Split a tree into repository state and worktree.

        A source containing a ``.git`` directory is a combined repository:
        the state is that directory and the worktree is everything else. A
        source without one is taken to be bare state.

        Args:
            source: Either bare git metadata or a worktree containing
                ``.git``.
            worktree: Overrides the worktree derived from source.

        Returns:
            The loaded snapshot.

        Raises:
            LoadError: If ``.git`` exists but is not a directory, such as the
                pointer file of a linked worktree or submodule.
        """
        try:
            state = source.directory(METADATA_DIR)
        except FileNotFoundError:
            self.logger.debug("repo_loaded", layout="bare", paths=len(source))
            return Repo(source, worktree if worktree is not None else Tree.empty(), self)
        except NotADirectoryError as e:
            msg = f"Cannot load repository: {METADATA_DIR} is not a directory"
            raise LoadError(msg) from e

        if worktree is None:
            worktree = source.without_directory(METADATA_DIR)
        self.logger.debug("repo_loaded", layout="combined", paths=len(source))
        return Repo(state, worktree, self)

    def load_path(self, path: Path, worktree: Tree | None = None) -> Repo:
        """Snapshot a directory on disk and load it.

        Raises:
            LoadError: If the directory cannot be read or classified.
        """
        try:
            source = read_tree(path)
        except OSError as e:
            msg = f"Cannot read repository at {path}: {e}"
            raise LoadError(msg, path=path) from e
        try:
            return self.load(source, worktree)
        except LoadError as e:
            raise LoadError(str(e), path=path) from e

    def clone(self, url: str) -> Repo:
        """Clone a remote repository into a new snapshot.

        Every call runs a new clone; remote repositories change, so results
        are never reused.

        Args:
            url: Anything ``git clone`` accepts.

        Raises:
            ProcessError: If the clone fails.
        """
        self.logger.info("clone_started", url=url)
        cloned = (
            self.container()
            .with_env_variable(CACHE_BUSTER_ENV, str(time_ns()))
            .with_workdir(CLONE_PATH)
            .with_exec(self.argv("clone", "--quiet", url, _CLONE_DIR))
            .directory(_CLONE_DIR)
        )
        return self.init().with_(
            cloned.directory(METADATA_DIR),
            cloned.without_directory(METADATA_DIR),
        )

    def remote(self, url: str) -> Remote:
        """Return a handle for querying a remote repository. Runs nothing."""
        return Remote(url, self)
