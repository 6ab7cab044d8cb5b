import shutil
import subprocess
from pathlib import Path

import pytest
from dulwich.porcelain import add, commit

from gitstate.config import Config
from gitstate.repository import Git
from gitstate.utils import create_logger


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)
            if shutil.which("git") is None:
                item.add_marker(pytest.mark.skip(reason="git is not installed"))


def run_git(path: Path, *args: str) -> str:
    """Run system git in path and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(path),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def _commit_files(repo_path: Path, files: dict[str, str], message: str) -> str:
    """Write files, stage and commit them, and return the commit SHA."""
    for name, content in files.items():
        target = repo_path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        _ = target.write_text(content)
    add(str(repo_path), paths=list(files))
    sha = commit(
        str(repo_path),
        message=message.encode(),
        author=b"Test <test@example.com>",
        committer=b"Test <test@example.com>",
        sign=False,
    )
    return sha.decode()


@pytest.fixture
def source_repo(tmp_path: Path) -> Path:
    """A repository on disk with known history.

    The first commit adds README.md and is tagged v1.0; branch ``feature``
    points at it. The second rewrites README.md, adds lib/util.py and is
    tagged v2.0 plus an annotated ``release``.
    """
    path = tmp_path / "source"
    path.mkdir()
    # Initialize with system git so the default branch is predictable
    _ = run_git(path, "init", "--quiet", "--initial-branch=main")
    _ = run_git(path, "config", "user.name", "Test User")
    _ = run_git(path, "config", "user.email", "test@example.com")
    _ = run_git(path, "config", "commit.gpgsign", "false")
    _ = run_git(path, "config", "tag.gpgsign", "false")

    _ = _commit_files(path, {"README.md": "version one\n"}, "first")
    _ = run_git(path, "tag", "v1.0")
    _ = run_git(path, "branch", "feature")
    _ = _commit_files(
        path,
        {"README.md": "version two\n", "lib/util.py": "VALUE = 2\n"},
        "second",
    )
    _ = run_git(path, "tag", "v2.0")
    _ = run_git(path, "tag", "-a", "release", "-m", "release")
    return path


@pytest.fixture
def source_commits(source_repo: Path) -> dict[str, str]:
    """SHAs of the source history, keyed by tag name."""
    return {
        tag: run_git(source_repo, "rev-parse", f"{tag}^{{commit}}").strip()
        for tag in ("v1.0", "v2.0")
    }


@pytest.fixture
def local_config() -> Config:
    """Configuration that needs no network access."""
    return Config.from_dict({"filter_repo": {"enabled": False}})


@pytest.fixture
def local_git(local_config: Config) -> Git:
    """A Git client running real git on the host."""
    return Git(local_config, logger=create_logger(level="error"))
