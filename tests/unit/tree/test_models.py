import pytest

from gitstate.exceptions import TreePathError
from gitstate.tree import DirectoryEntry, FileEntry, SymlinkEntry, Tree, normalize_path


class TestNormalizePath:
    def test_strips_redundant_components(self) -> None:
        assert normalize_path("a//b/./c") == "a/b/c"

    def test_empty_and_dot_name_the_root(self) -> None:
        assert normalize_path("") == "."
        assert normalize_path(".") == "."

    def test_rejects_absolute_paths(self) -> None:
        with pytest.raises(TreePathError) as exc_info:
            normalize_path("/etc/passwd")

        assert exc_info.value.path == "/etc/passwd"

    def test_rejects_parent_components(self) -> None:
        with pytest.raises(TreePathError):
            normalize_path("a/../b")

    def test_tree_path_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="relative"):
            normalize_path("/abs")


class TestConstruction:
    def test_empty_tree(self) -> None:
        tree = Tree.empty()

        assert tree.is_empty
        assert len(tree) == 0
        assert tree.entries() == ()

    def test_from_files_adds_parent_directories(self) -> None:
        tree = Tree.from_files({"src/pkg/mod.py": b"x = 1\n"})

        assert tree.paths() == ("src", "src/pkg", "src/pkg/mod.py")
        assert tree.get("src") == DirectoryEntry()

    def test_from_files_encodes_strings(self) -> None:
        tree = Tree.from_files({"README": "héllo"})

        assert tree.file("README") == "héllo".encode()

    def test_from_files_accepts_entries(self) -> None:
        tree = Tree.from_files(
            {"run.sh": FileEntry(b"#!/bin/sh\n", executable=True), "link": SymlinkEntry("run.sh")}
        )

        assert tree.get("run.sh") == FileEntry(b"#!/bin/sh\n", executable=True)
        assert tree.get("link") == SymlinkEntry("run.sh")

    def test_constructor_normalizes_paths(self) -> None:
        assert Tree({"./a//b": FileEntry(b"")}) == Tree.from_files({"a/b": b""})

    def test_constructor_rejects_escaping_paths(self) -> None:
        with pytest.raises(TreePathError):
            Tree.from_files({"../outside": b""})

    @pytest.mark.parametrize(
        "entries",
        [
            {"a/b": FileEntry(b""), "a": FileEntry(b"")},
            {"a": FileEntry(b""), "a/b": FileEntry(b"")},
            {"a/b/c": FileEntry(b""), "a": SymlinkEntry("elsewhere")},
            {"a": SymlinkEntry("elsewhere"), "a/b/c": FileEntry(b"")},
        ],
    )
    def test_constructor_rejects_non_directory_ancestor(
        self, entries: dict[str, FileEntry | SymlinkEntry]
    ) -> None:
        with pytest.raises(TreePathError) as exc_info:
            Tree(entries)

        assert exc_info.value.path == "a"

    def test_explicit_directory_ancestor_in_any_order(self) -> None:
        forward = Tree({"a": DirectoryEntry(), "a/b": FileEntry(b"x")})
        backward = Tree({"a/b": FileEntry(b"x"), "a": DirectoryEntry()})

        assert forward == backward == Tree.from_files({"a/b": b"x"})


class TestQueries:
    def test_entries_lists_immediate_children_sorted(self) -> None:
        tree = Tree.from_files({"b.txt": b"", "a/x": b"", "a/y/z": b""})

        assert tree.entries() == ("a", "b.txt")
        assert tree.entries("a") == ("x", "y")

    def test_entries_missing_path_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            Tree.empty().entries("missing")

    def test_entries_on_file_raises(self) -> None:
        tree = Tree.from_files({"file": b""})

        with pytest.raises(NotADirectoryError):
            tree.entries("file")

    def test_file_returns_contents(self) -> None:
        tree = Tree.from_files({"docs/index.md": b"# Docs"})

        assert tree.file("docs/index.md") == b"# Docs"

    def test_file_on_directory_raises(self) -> None:
        tree = Tree.from_files({"docs/index.md": b""})

        with pytest.raises(IsADirectoryError):
            tree.file("docs")

    def test_file_missing_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            Tree.empty().file("nope")

    def test_contains(self) -> None:
        tree = Tree.from_files({"a/b": b""})

        assert "a" in tree
        assert "a/b" in tree
        assert "." in tree
        assert "c" not in tree
        assert "/a" not in tree
        assert 42 not in tree

    def test_get_root_is_directory(self) -> None:
        assert Tree.empty().get(".") == DirectoryEntry()


class TestDirectory:
    def test_returns_subtree(self) -> None:
        tree = Tree.from_files({".git/HEAD": b"ref", ".git/refs/heads/main": b"abc", "README": b""})

        state = tree.directory(".git")

        assert state == Tree.from_files({"HEAD": b"ref", "refs/heads/main": b"abc"})

    def test_root_returns_same_tree(self) -> None:
        tree = Tree.from_files({"a": b""})

        assert tree.directory(".") is tree

    def test_missing_raises_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Tree.from_files({"README": b""}).directory(".git")

    def test_file_raises_not_a_directory(self) -> None:
        with pytest.raises(NotADirectoryError):
            Tree.from_files({".git": b"gitdir: ../x"}).directory(".git")

    def test_empty_directory_survives(self) -> None:
        tree = Tree.empty().with_directory("refs/tags", Tree.empty())

        assert tree.directory("refs/tags").is_empty
        assert tree.entries("refs") == ("tags",)


class TestWithoutDirectory:
    def test_removes_path_and_descendants(self) -> None:
        tree = Tree.from_files({".git/HEAD": b"", ".git/objects/ab/cd": b"", "README": b""})

        assert tree.without_directory(".git") == Tree.from_files({"README": b""})

    def test_absent_path_is_noop(self) -> None:
        tree = Tree.from_files({"README": b""})

        assert tree.without_directory(".git") == tree

    def test_keeps_siblings_sharing_a_prefix(self) -> None:
        tree = Tree.from_files({".git/HEAD": b"", ".gitignore": b"*.pyc\n"})

        assert tree.without_directory(".git").paths() == (".gitignore",)

    def test_root_yields_empty_tree(self) -> None:
        assert Tree.from_files({"a": b""}).without_directory(".").is_empty


class TestWithDirectory:
    def test_nests_tree_at_path(self) -> None:
        worktree = Tree.from_files({"README": b"hi"})
        state = Tree.from_files({"HEAD": b"ref"})

        combined = worktree.with_directory(".git", state)

        assert combined.paths() == (".git", ".git/HEAD", "README")

    def test_replaces_existing_contents(self) -> None:
        tree = Tree.from_files({"dir/old": b"", "dir/keep": b""})

        result = tree.with_directory("dir", Tree.from_files({"new": b""}))

        assert result.entries("dir") == ("new",)

    def test_replaces_file_on_the_way_down(self) -> None:
        tree = Tree.from_files({"a": b"file"})

        result = tree.with_directory("a/b", Tree.from_files({"c": b""}))

        assert result.paths() == ("a", "a/b", "a/b/c")

    def test_root_returns_given_tree(self) -> None:
        replacement = Tree.from_files({"x": b""})

        assert Tree.from_files({"y": b""}).with_directory(".", replacement) == replacement

    def test_does_not_mutate_receiver(self) -> None:
        tree = Tree.from_files({"a": b""})

        _ = tree.with_directory("b", Tree.from_files({"c": b""}))

        assert tree.paths() == ("a",)


class TestWithFile:
    def test_adds_file_and_parents(self) -> None:
        tree = Tree.empty().with_file("bin/tool", b"#!/bin/sh", executable=True)

        assert tree.get("bin/tool") == FileEntry(b"#!/bin/sh", executable=True)
        assert tree.get("bin") == DirectoryEntry()

    def test_replaces_directory(self) -> None:
        tree = Tree.from_files({"x/y": b""})

        result = tree.with_file("x", b"now a file")

        assert result.paths() == ("x",)
        assert result.file("x") == b"now a file"

    def test_root_is_rejected(self) -> None:
        with pytest.raises(TreePathError):
            Tree.empty().with_file(".", b"")


class TestEquality:
    def test_structural_equality(self) -> None:
        built = Tree.empty().with_file("a/b", b"1")

        assert built == Tree.from_files({"a/b": b"1"})
        assert hash(built) == hash(Tree.from_files({"a/b": b"1"}))

    def test_executable_bit_matters(self) -> None:
        assert Tree.empty().with_file("f", b"") != Tree.empty().with_file(
            "f", b"", executable=True
        )

    def test_not_equal_to_other_types(self) -> None:
        assert Tree.empty() != {}

    def test_repr_counts_entries(self) -> None:
        assert repr(Tree.from_files({"a/b": b""})) == "Tree(entries=2, files=1)"
