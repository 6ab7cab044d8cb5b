"""Reading and writing trees on the local filesystem."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from gitstate.tree._models import DirectoryEntry, Entry, FileEntry, SymlinkEntry, Tree

_FILE_MODE = 0o644
_EXECUTABLE_MODE = 0o755


def _scan(directory: Path, prefix: str, entries: dict[str, Entry]) -> None:
    with os.scandir(directory) as it:
        for dirent in it:
            rel = f"{prefix}{dirent.name}"
            if dirent.is_symlink():
                entries[rel] = SymlinkEntry(os.readlink(dirent.path))
            elif dirent.is_dir(follow_symlinks=False):
                entries[rel] = DirectoryEntry()
                _scan(Path(dirent.path), f"{rel}/", entries)
            elif dirent.is_file(follow_symlinks=False):
                mode = dirent.stat(follow_symlinks=False).st_mode
                entries[rel] = FileEntry(
                    Path(dirent.path).read_bytes(),
                    executable=bool(mode & stat.S_IXUSR),
                )
            # Sockets, FIFOs and device nodes have no tree representation.


def read_tree(path: Path) -> Tree:
    """Snapshot an on-disk directory as a Tree.

    Symlinks are recorded, not followed.

    Args:
        path: Directory to read.

    Returns:
        A Tree holding the directory's regular files, directories and symlinks.

    Raises:
        FileNotFoundError: If path does not exist.
        NotADirectoryError: If path is not a directory.
        PermissionError: If any part of the directory cannot be read.
    """
    entries: dict[str, Entry] = {}
    _scan(path, "", entries)
    return Tree(entries)


def write_tree(tree: Tree, path: Path) -> None:
    """Materialise a Tree into a directory.

    The directory is created if needed. Existing files at the same paths are
    overwritten; other existing content is left alone.

    Args:
        tree: The tree to write.
        path: Destination directory.
    """
    path.mkdir(parents=True, exist_ok=True)
    for rel, entry in tree.items():
        target = path / rel
        match entry:
            case DirectoryEntry():
                target.mkdir(exist_ok=True)
            case SymlinkEntry(target=link):
                if target.is_symlink() or target.exists():
                    target.unlink()
                target.symlink_to(link)
            case FileEntry(data=data, executable=executable):
                if target.is_symlink():
                    target.unlink()
                elif target.exists():
                    # Git stores objects read-only.
                    target.chmod(_FILE_MODE)
                _ = target.write_bytes(data)
                target.chmod(_EXECUTABLE_MODE if executable else _FILE_MODE)
