"""Querying remote repositories with ``git ls-remote``.

Listings run in a toolchain container with no repository mounted, so they
never depend on local state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gitstate.exceptions import RefNotFoundError
from gitstate.repository._listing import (
    BRANCH_PREFIX,
    TAG_PREFIX,
    RefLine,
    compile_filter,
    parse_ref_listing,
)

if TYPE_CHECKING:
    from gitstate.repository._git import Git
    from gitstate.repository._refs import Commit
    from gitstate.repository._repo import Repo


def _fetch(git: Git, url: str, ref: str) -> Repo:
    """Fetch a single ref from url into a new repository."""
    return git.init().with_command(["fetch", "--quiet", url, ref])


@dataclass(frozen=True, slots=True)
class RemoteTag:
    """A tag as listed by a remote.

    Attributes:
        name: The tag name without ``refs/tags/``.
        commit_id: The object id the remote listed for it.
        url: The remote the tag was listed from.
    """

    name: str
    commit_id: str
    url: str
    git: Git = field(repr=False, compare=False)

    @property
    def full_name(self) -> str:
        """The fully qualified ref name."""
        return f"{TAG_PREFIX}{self.name}"

    def commit(self) -> Commit:
        """Fetch only this tag into a new repository and return its commit.

        Raises:
            ProcessError: If the fetch fails.
        """
        return _fetch(self.git, self.url, self.full_name).commit(self.commit_id)


@dataclass(frozen=True, slots=True)
class RemoteBranch:
    """A branch as listed by a remote.

    Attributes:
        name: The branch name without ``refs/heads/``.
        commit_id: The commit the branch pointed at when listed.
        url: The remote the branch was listed from.
    """

    name: str
    commit_id: str
    url: str
    git: Git = field(repr=False, compare=False)

    @property
    def full_name(self) -> str:
        """The fully qualified ref name."""
        return f"{BRANCH_PREFIX}{self.name}"

    def commit(self) -> Commit:
        """Fetch only this branch into a new repository and return its commit.

        Raises:
            ProcessError: If the fetch fails.
        """
        return _fetch(self.git, self.url, self.full_name).commit(self.commit_id)


@dataclass(frozen=True, slots=True)
class Remote:
    """A remote repository, addressed by URL.

    Creating a Remote runs nothing; every lookup runs a fresh listing.
    Listings keep the remote's own order. Annotated tags also appear with
    their peeled ``^{}`` entry, exactly as git lists them.

    Example:
        >>> remote = Git().remote("https://github.com/octocat/Hello-World.git")
        >>> [b.name for b in remote.branches()]
        ['master', 'octocat-patch-1', 'test']
    """

    url: str
    git: Git = field(repr=False, compare=False)

    # =========================================================================
    # Tags
    # =========================================================================

    def tag(self, name: str) -> RemoteTag:
        """Look up a single tag.

        Raises:
            RefNotFoundError: If the remote lists no tag matching name.
            ProcessError: If the listing fails.
        """
        ref = self._lookup("tag", "--tags", TAG_PREFIX, name)
        return RemoteTag(ref.name, ref.commit_id, self.url, self.git)

    def tags(self, pattern: str | None = None) -> list[RemoteTag]:
        """List tags, optionally keeping only names that pattern matches.

        Args:
            pattern: A regular expression searched for anywhere in each name.

        Raises:
            InvalidFilterError: If pattern is invalid. Nothing runs.
            ProcessError: If the listing fails.
        """
        refs = self._list("tag", "--tags", TAG_PREFIX, pattern)
        return [RemoteTag(r.name, r.commit_id, self.url, self.git) for r in refs]

    # =========================================================================
    # Branches
    # =========================================================================

    def branch(self, name: str) -> RemoteBranch:
        """Look up a single branch.

        Raises:
            RefNotFoundError: If the remote lists no branch matching name.
            ProcessError: If the listing fails.
        """
        ref = self._lookup("branch", "--heads", BRANCH_PREFIX, name)
        return RemoteBranch(ref.name, ref.commit_id, self.url, self.git)

    def branches(self, pattern: str | None = None) -> list[RemoteBranch]:
        """List branches, optionally keeping only names that pattern matches.

        Raises:
            InvalidFilterError: If pattern is invalid. Nothing runs.
            ProcessError: If the listing fails.
        """
        refs = self._list("branch", "--heads", BRANCH_PREFIX, pattern)
        return [RemoteBranch(r.name, r.commit_id, self.url, self.git) for r in refs]

    # =========================================================================
    # Listing
    # =========================================================================

    def _listing(self, flag: str, *patterns: str) -> str:
        argv = self.git.argv("ls-remote", flag, self.url, *patterns)
        return self.git.container().with_exec(argv).stdout()

    def _lookup(self, kind: str, flag: str, prefix: str, name: str) -> RefLine:
        refs = parse_ref_listing(self._listing(flag, name), prefix)
        if not refs:
            msg = f"No {kind} named {name!r} at {self.url}"
            raise RefNotFoundError(msg, url=self.url, name=name, kind=kind)
        return refs[0]

    def _list(
        self,
        kind: str,
        flag: str,
        prefix: str,
        pattern: str | None,
    ) -> list[RefLine]:
        name_filter = compile_filter(pattern)
        refs = parse_ref_listing(self._listing(flag), prefix, name_filter)
        self.git.logger.debug("remote_listed", url=self.url, kind=kind, count=len(refs))
        return refs
