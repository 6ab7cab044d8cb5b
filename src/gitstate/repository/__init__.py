"""Git repositories as immutable snapshots.

Classes:
    Git: Entry point that creates snapshots and remote handles.
    Repo: A (state, worktree) snapshot; every command returns a new one.
    GitCommand: A git invocation bound to a snapshot, run on demand.
    Tag: A local tag descriptor.
    Commit: A local commit descriptor.
    Remote: A remote repository addressed by URL.
    RemoteTag: A tag as listed by a remote.
    RemoteBranch: A branch as listed by a remote.
    RefLine: One parsed ``git ls-remote`` line.

Functions:
    parse_ref_line: Parse a single listing line.
    parse_ref_listing: Parse and filter a whole listing.
    compile_filter: Compile a ref name filter.
"""

from gitstate.repository._command import (
    CLONE_PATH,
    METADATA_DIR,
    STATE_PATH,
    WORKTREE_PATH,
    GitCommand,
)
from gitstate.repository._git import CACHE_BUSTER_ENV, Git
from gitstate.repository._listing import (
    BRANCH_PREFIX,
    TAG_PREFIX,
    RefLine,
    compile_filter,
    parse_ref_line,
    parse_ref_listing,
)
from gitstate.repository._refs import Commit, Tag
from gitstate.repository._remote import Remote, RemoteBranch, RemoteTag
from gitstate.repository._repo import Repo

__all__ = [
    "BRANCH_PREFIX",
    "CACHE_BUSTER_ENV",
    "CLONE_PATH",
    "METADATA_DIR",
    "STATE_PATH",
    "TAG_PREFIX",
    "WORKTREE_PATH",
    "Commit",
    "Git",
    "GitCommand",
    "RefLine",
    "Remote",
    "RemoteBranch",
    "RemoteTag",
    "Repo",
    "Tag",
    "compile_filter",
    "parse_ref_line",
    "parse_ref_listing",
]
