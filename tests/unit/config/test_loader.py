# pyright: reportAny=false, reportUnknownArgumentType=false
import tomllib
from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem
from pytest_mock import MockerFixture

from gitstate.config import (
    ConfigLoadError,
    deep_merge,
    discover_config_files,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from gitstate.config._loader import _parse_env_value


class _PositionlessDecodeError(tomllib.TOMLDecodeError):
    def __init__(self) -> None:
        ValueError.__init__(self, "Invalid value")


class TestReadTomlFile:
    def test_parses_valid_toml(self, fs: FakeFilesystem) -> None:
        content = """
[environment]
git_binary = "git"
timeout_seconds = 30
"""
        path = Path("/test/gitstate.toml")
        fs.create_file(path, contents=content)

        assert read_toml_file(path) == {"environment": {"git_binary": "git", "timeout_seconds": 30}}

    def test_raises_file_not_found_for_missing_file(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            read_toml_file(Path("/test/missing.toml"))

    def test_raises_config_load_error_with_location(self, fs: FakeFilesystem) -> None:
        path = Path("/test/invalid.toml")
        fs.create_file(path, contents='[section\nkey = "unclosed bracket"\n')

        with pytest.raises(ConfigLoadError) as exc_info:
            read_toml_file(path)

        error = exc_info.value
        assert error.path == path
        assert "line 1" in str(error)
        assert error.line == getattr(error.__cause__, "lineno", None)
        assert error.column == getattr(error.__cause__, "colno", None)

    def test_decode_error_without_position_attributes(
        self, fs: FakeFilesystem, mocker: MockerFixture
    ) -> None:
        path = Path("/test/invalid.toml")
        fs.create_file(path, contents="[section\n")
        _ = mocker.patch("tomllib.load", side_effect=_PositionlessDecodeError())

        with pytest.raises(ConfigLoadError) as exc_info:
            read_toml_file(path)

        assert exc_info.value.line is None
        assert exc_info.value.column is None


class TestDeepMerge:
    def test_nested_tables_merge(self) -> None:
        base = {"ssh": {"private_key": "a", "known_hosts": "b"}}
        override = {"ssh": {"known_hosts": "c"}}

        assert deep_merge(base, override) == {"ssh": {"private_key": "a", "known_hosts": "c"}}

    def test_inputs_not_modified(self) -> None:
        base = {"logging": {"level": "info"}}
        override = {"logging": {"level": "debug"}}

        _ = deep_merge(base, override)

        assert base == {"logging": {"level": "info"}}
        assert override == {"logging": {"level": "debug"}}

    def test_scalar_replaces_table(self) -> None:
        assert deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


class TestSetNestedKey:
    def test_creates_intermediate_tables(self) -> None:
        data: dict[str, object] = {}

        set_nested_key(data, "filter_repo.enabled", False)

        assert data == {"filter_repo": {"enabled": False}}

    def test_replaces_scalar_in_the_way(self) -> None:
        data: dict[str, object] = {"ssh": "oops"}

        set_nested_key(data, "ssh.private_key", "/k")

        assert data == {"ssh": {"private_key": "/k"}}


class TestParseEnvValue:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("FALSE", False),
            ("2.5", 2.5),
            ('["a", "b"]', ["a", "b"]),
            ("30", "30"),
            ("~/.ssh/id_ed25519", "~/.ssh/id_ed25519"),
            ("[not json", "[not json"),
        ],
    )
    def test_infers_types(self, raw: str, expected: object) -> None:
        assert _parse_env_value(raw) == expected

    def test_dotted_path_that_is_not_a_float(self) -> None:
        assert _parse_env_value("/etc/ssh/known_hosts.d") == "/etc/ssh/known_hosts.d"


class TestParseEnvVars:
    def test_maps_double_underscore_to_nesting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITSTATE_LOGGING__LEVEL", "debug")
        monkeypatch.setenv("GITSTATE_FILTER_REPO__ENABLED", "false")

        assert parse_env_vars() == {
            "logging": {"level": "debug"},
            "filter_repo": {"enabled": False},
        }

    @pytest.mark.parametrize(
        "name",
        [
            "GITSTATE_CONFIG",
            "GITSTATE_DEBUG",
            "GITSTATE_STRICT_CONFIG",
            "GITSTATE_CACHE_BUSTER",
            "GITSTATE_LOG_LEVEL",
        ],
    )
    def test_skips_process_switches(self, monkeypatch: pytest.MonkeyPatch, name: str) -> None:
        monkeypatch.setenv(name, "1")

        assert parse_env_vars() == {}

    def test_ignores_other_prefixes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GIT_DIR", "/somewhere")

        assert parse_env_vars() == {}


class TestDiscoverConfigFiles:
    def test_project_file_in_cwd(self, tmp_path: Path) -> None:
        project = tmp_path / "gitstate.toml"
        project.write_text("")

        assert discover_config_files(tmp_path) == [project]

    def test_user_file_comes_first(self, tmp_path: Path) -> None:
        from gitstate.config import get_user_config_file

        user = get_user_config_file()
        user.parent.mkdir(parents=True)
        user.write_text("")
        project = tmp_path / "gitstate.toml"
        project.write_text("")

        assert discover_config_files(tmp_path) == [user, project]

    def test_explicit_file_comes_last(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        explicit = tmp_path / "ci.toml"
        explicit.write_text("")
        project = tmp_path / "gitstate.toml"
        project.write_text("")
        monkeypatch.setenv("GITSTATE_CONFIG", str(explicit))

        assert discover_config_files(tmp_path) == [project, explicit]

    def test_missing_explicit_file_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITSTATE_CONFIG", str(tmp_path / "missing.toml"))

        with pytest.raises(ConfigLoadError, match="GITSTATE_CONFIG"):
            discover_config_files(tmp_path)

    def test_nothing_found(self, tmp_path: Path) -> None:
        assert discover_config_files(tmp_path) == []
