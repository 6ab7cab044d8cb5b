"""Local ref descriptors.

Tags and commits are lazy: nothing runs until tree() is called, which
checks the ref out in a new snapshot and returns that snapshot's worktree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gitstate.repository._listing import TAG_PREFIX

if TYPE_CHECKING:
    from gitstate.repository._repo import Repo
    from gitstate.tree import Tree


@dataclass(frozen=True, slots=True)
class Tag:
    """A tag in a repository snapshot.

    Attributes:
        name: The tag name, short ("v1.0") or full ("refs/tags/v1.0").
        repository: The snapshot the tag belongs to.
    """

    name: str
    repository: Repo = field(repr=False)

    @property
    def full_name(self) -> str:
        """The fully qualified ref name.

        Example:
            >>> Tag("v1.0", repo).full_name
            'refs/tags/v1.0'
            >>> Tag("tags/v1.0", repo).full_name
            'refs/tags/v1.0'
        """
        if self.name.startswith(TAG_PREFIX):
            return self.name
        if self.name.startswith("tags/"):
            return f"refs/{self.name}"
        return f"{TAG_PREFIX}{self.name}"

    def tree(self) -> Tree:
        """Check out the tag and return the resulting worktree."""
        return self.repository.checkout(self.name).worktree


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit in a repository snapshot.

    Attributes:
        digest: The commit id.
        repository: The snapshot the commit belongs to.
    """

    digest: str
    repository: Repo = field(repr=False)

    def tree(self) -> Tree:
        """Check out the commit and return the resulting worktree."""
        return self.repository.checkout(self.digest).worktree
