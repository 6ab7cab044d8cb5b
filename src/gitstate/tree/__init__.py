"""Immutable directory trees.

Classes:
    Tree: An immutable, structurally compared directory tree.
    FileEntry: A regular file with contents and an executable flag.
    DirectoryEntry: An explicit directory.
    SymlinkEntry: A symbolic link.

Functions:
    read_tree: Snapshot an on-disk directory.
    write_tree: Materialise a tree on disk.
    normalize_path: Canonicalise a relative tree path.
"""

from gitstate.tree._io import read_tree, write_tree
from gitstate.tree._models import (
    DirectoryEntry,
    Entry,
    FileEntry,
    SymlinkEntry,
    Tree,
    normalize_path,
)

__all__ = [
    "DirectoryEntry",
    "Entry",
    "FileEntry",
    "SymlinkEntry",
    "Tree",
    "normalize_path",
    "read_tree",
    "write_tree",
]
