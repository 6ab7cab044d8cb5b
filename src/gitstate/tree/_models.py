"""Immutable directory tree values.

A Tree is the unit of exchange between the repository model and the
execution environment. It is a canonical mapping from relative POSIX paths to
entries: every ancestor directory of a file is stored explicitly, so two trees
with the same files and directories compare equal regardless of how they were
built.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Final, Self

from gitstate.exceptions import TreePathError

ROOT: Final = "."


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A regular file.

    Attributes:
        data: File contents.
        executable: Whether the owner execute bit is set.
    """

    data: bytes
    executable: bool = False


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """A directory. Stored explicitly so empty directories survive."""


@dataclass(frozen=True, slots=True)
class SymlinkEntry:
    """A symbolic link.

    Attributes:
        target: The link target, exactly as stored on disk.
    """

    target: str


type Entry = FileEntry | DirectoryEntry | SymlinkEntry

_DIRECTORY: Final = DirectoryEntry()


def normalize_path(path: str | PurePosixPath) -> str:
    """Normalize a tree path to its canonical relative form.

    Args:
        path: A relative path. "" and "." both name the tree root.

    Returns:
        The path with redundant separators and "." components removed,
        or "." for the root.

    Raises:
        TreePathError: If the path is absolute or contains "..".
    """
    pure = PurePosixPath(path)
    if pure.is_absolute():
        msg = f"Tree paths must be relative: {path}"
        raise TreePathError(msg, path=str(path))
    if ".." in pure.parts:
        msg = f"Tree paths must not contain '..': {path}"
        raise TreePathError(msg, path=str(path))
    normalized = pure.as_posix()
    return normalized or ROOT


def _ancestors(path: str) -> Iterator[str]:
    """Yield every proper ancestor directory of a normalized path."""
    parts = path.split("/")
    for i in range(1, len(parts)):
        yield "/".join(parts[:i])


def _is_under(path: str, prefix: str) -> bool:
    if prefix == ROOT:
        return True
    return path == prefix or path.startswith(prefix + "/")


class Tree:
    """An immutable directory tree.

    Every operation returns a new Tree; instances are never mutated after
    construction and may be shared freely between snapshots and threads.

    Example:
        >>> tree = Tree.from_files({"README.md": b"hello", "src/main.py": b""})
        >>> tree.entries()
        ('README.md', 'src')
        >>> tree.directory("src").entries()
        ('main.py',)
    """

    __slots__: Final = ("_entries", "_hash")
    _entries: dict[str, Entry]
    _hash: int | None

    def __init__(self, entries: Mapping[str, Entry] | None = None) -> None:
        """Build a tree from a path to entry mapping.

        Paths are normalized and missing ancestor directories are added.

        Args:
            entries: Mapping of relative paths to entries.

        Raises:
            TreePathError: If any path is absolute or contains "..", or if a
                file or symlink is also the ancestor of another path.
        """
        canonical: dict[str, Entry] = {}
        parents: set[str] = set()
        for raw_path, entry in (entries or {}).items():
            path = normalize_path(raw_path)
            if path == ROOT:
                continue
            if path in parents and not isinstance(entry, DirectoryEntry):
                msg = f"Path has children but is not a directory: {path}"
                raise TreePathError(msg, path=path)
            for ancestor in _ancestors(path):
                existing = canonical.get(ancestor)
                if existing is not None and not isinstance(existing, DirectoryEntry):
                    msg = f"Path has children but is not a directory: {ancestor}"
                    raise TreePathError(msg, path=ancestor)
                canonical[ancestor] = _DIRECTORY
                parents.add(ancestor)
            canonical[path] = entry
        self._entries = canonical
        self._hash = None

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def empty(cls) -> Self:
        """Return a tree with no entries."""
        return cls()

    @classmethod
    def from_files(cls, files: Mapping[str, bytes | str | Entry]) -> Self:
        """Build a tree from file contents.

        Args:
            files: Mapping of relative paths to contents. ``str`` values are
                encoded as UTF-8; entry values are used as-is.

        Returns:
            A new tree containing the given files and their parent directories.
        """
        entries: dict[str, Entry] = {}
        for path, value in files.items():
            if isinstance(value, str):
                entries[path] = FileEntry(value.encode("utf-8"))
            elif isinstance(value, bytes):
                entries[path] = FileEntry(value)
            else:
                entries[path] = value
        return cls(entries)

    @classmethod
    def _from_canonical(cls, entries: dict[str, Entry]) -> Self:
        tree = cls.__new__(cls)
        tree._entries = entries
        tree._hash = None
        return tree

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def is_empty(self) -> bool:
        """True if the tree has no entries."""
        return not self._entries

    def paths(self) -> tuple[str, ...]:
        """Return every path in the tree, sorted."""
        return tuple(sorted(self._entries))

    def items(self) -> Iterator[tuple[str, Entry]]:
        """Iterate over (path, entry) pairs in sorted path order.

        Parents always precede their children.
        """
        for path in sorted(self._entries):
            yield path, self._entries[path]

    def get(self, path: str | PurePosixPath) -> Entry | None:
        """Return the entry at path, or None if absent."""
        normalized = normalize_path(path)
        if normalized == ROOT:
            return _DIRECTORY
        return self._entries.get(normalized)

    def _require_directory(self, path: str) -> None:
        if path == ROOT:
            return
        entry = self._entries.get(path)
        if entry is None:
            msg = f"No such directory in tree: {path}"
            raise FileNotFoundError(msg)
        if not isinstance(entry, DirectoryEntry):
            msg = f"Not a directory in tree: {path}"
            raise NotADirectoryError(msg)

    def entries(self, path: str | PurePosixPath = ROOT) -> tuple[str, ...]:
        """List the immediate children of a directory.

        Args:
            path: Directory to list, relative to the tree root.

        Returns:
            Sorted child names.

        Raises:
            FileNotFoundError: If nothing exists at path.
            NotADirectoryError: If path names a file or symlink.
        """
        normalized = normalize_path(path)
        self._require_directory(normalized)
        prefix = "" if normalized == ROOT else normalized + "/"
        return tuple(
            sorted(
                p[len(prefix) :]
                for p in self._entries
                if p.startswith(prefix) and "/" not in p[len(prefix) :]
            )
        )

    def file(self, path: str | PurePosixPath) -> bytes:
        """Return the contents of a regular file.

        Raises:
            FileNotFoundError: If nothing exists at path.
            IsADirectoryError: If path names a directory or symlink.
        """
        normalized = normalize_path(path)
        entry = self._entries.get(normalized)
        if entry is None:
            msg = f"No such file in tree: {normalized}"
            raise FileNotFoundError(msg)
        if not isinstance(entry, FileEntry):
            msg = f"Not a regular file in tree: {normalized}"
            raise IsADirectoryError(msg)
        return entry.data

    # =========================================================================
    # Transformations
    # =========================================================================

    def directory(self, path: str | PurePosixPath) -> Tree:
        """Return the sub-tree rooted at path.

        Raises:
            FileNotFoundError: If nothing exists at path.
            NotADirectoryError: If path names a file or symlink.
        """
        normalized = normalize_path(path)
        self._require_directory(normalized)
        if normalized == ROOT:
            return self
        prefix = normalized + "/"
        return Tree._from_canonical(
            {
                p[len(prefix) :]: entry
                for p, entry in self._entries.items()
                if p.startswith(prefix)
            }
        )

    def without_directory(self, path: str | PurePosixPath) -> Tree:
        """Return a copy without path and everything beneath it.

        Removing a path that does not exist is a no-op.
        """
        normalized = normalize_path(path)
        if normalized == ROOT:
            return Tree()
        return Tree._from_canonical(
            {
                p: entry
                for p, entry in self._entries.items()
                if not _is_under(p, normalized)
            }
        )

    def _place(self, path: str, entry: Entry) -> dict[str, Entry]:
        """Copy entries with path cleared and its ancestors made directories."""
        entries = {
            p: e for p, e in self._entries.items() if not _is_under(p, path)
        }
        for ancestor in _ancestors(path):
            if not isinstance(entries.get(ancestor), DirectoryEntry):
                # A file on the way down is replaced by a directory.
                entries = {
                    p: e for p, e in entries.items() if not _is_under(p, ancestor)
                }
                entries[ancestor] = _DIRECTORY
        entries[path] = entry
        return entries

    def with_directory(self, path: str | PurePosixPath, tree: Tree) -> Tree:
        """Return a copy with the contents at path replaced by tree.

        Anything previously at or beneath path is discarded. Missing parent
        directories are created.
        """
        normalized = normalize_path(path)
        if normalized == ROOT:
            return tree
        entries = self._place(normalized, _DIRECTORY)
        for sub_path, entry in tree._entries.items():
            entries[f"{normalized}/{sub_path}"] = entry
        return Tree._from_canonical(entries)

    def with_file(
        self,
        path: str | PurePosixPath,
        data: bytes,
        *,
        executable: bool = False,
    ) -> Tree:
        """Return a copy with a regular file written at path.

        Raises:
            TreePathError: If path names the tree root.
        """
        normalized = normalize_path(path)
        if normalized == ROOT:
            msg = "Cannot write a file at the tree root"
            raise TreePathError(msg, path=str(path))
        return Tree._from_canonical(
            self._place(normalized, FileEntry(data, executable=executable))
        )

    # =========================================================================
    # Dunder Methods
    # =========================================================================

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str | PurePosixPath):
            return False
        try:
            return self.get(path) is not None
        except TreePathError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._entries.items()))
        return self._hash

    def __repr__(self) -> str:
        files = sum(1 for e in self._entries.values() if isinstance(e, FileEntry))
        return f"Tree(entries={len(self._entries)}, files={files})"
