from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from tagwatch.config import (
    GateConfig,
    _parse_section,
    _pyproject_has_tagwatch_section,
    _read_toml,
    discover_config_file,
    load_config,
    validate_prefix,
)
from tagwatch.exceptions import ConfigError, ConfigurationMissing


@pytest.mark.unit
class TestGateConfig:
    """Tests for the GateConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test defaults: no paths, standard prefix and timeout."""
        config = GateConfig()

        assert config.template is None
        assert config.output is None
        assert config.prefix == "GIT_TAG_VERSION_"
        assert config.timeout == 30.0
        assert config.source_path is None

    def test_to_log_dict_excludes_metadata(self) -> None:
        """Test to_log_dict omits source_path."""
        result = GateConfig(source_path=Path("/x/tagwatch.toml")).to_log_dict()

        assert "source_path" not in result
        assert result["prefix"] == "GIT_TAG_VERSION_"

    def test_merged_ignores_none(self) -> None:
        """Test None overrides keep the existing value."""
        config = GateConfig(prefix="APP_")

        assert config.merged(prefix=None, timeout=None).prefix == "APP_"

    def test_merged_normalizes_paths(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test path overrides become absolute."""
        monkeypatch.chdir(tmp_path)

        merged = GateConfig().merged(template=Path("v.in"), timeout=5.0)

        assert merged.template == (tmp_path / "v.in").resolve()
        assert merged.timeout == 5.0

    def test_merged_keeps_bare_git_name(self) -> None:
        """Test a bare executable name is kept for PATH lookup."""
        merged = GateConfig().merged(git_executable=Path("git"))

        assert merged.git_executable == Path("git")

    def test_normalized_fills_directories(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test working_dir and build_dir default to the current directory."""
        monkeypatch.chdir(tmp_path)

        config = GateConfig().normalized()

        assert config.working_dir == tmp_path.resolve()
        assert config.build_dir == tmp_path.resolve()
        assert config.template is None

    def test_require(self) -> None:
        """Test require names the first missing option."""
        config = GateConfig(template=Path("/t.in"))

        with pytest.raises(ConfigurationMissing) as exc_info:
            config.require("template", "output")

        assert exc_info.value.option == "output"
        assert '"output"' in str(exc_info.value)


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test an explicit path wins over discovered files."""
        explicit = tmp_path / "custom.toml"
        explicit.write_text("[tagwatch]\n", encoding="utf-8")
        (tmp_path / "tagwatch.toml").write_text("[tagwatch]\n", encoding="utf-8")

        with patch("tagwatch.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(explicit)

        assert result == explicit.resolve()

    def test_explicit_path_not_found(self, tmp_path: Path) -> None:
        """Test a missing explicit path is a ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "missing.toml")

        assert "not found" in str(exc_info.value)

    def test_finds_standalone_file(self, tmp_path: Path) -> None:
        """Test tagwatch.toml in the current directory is found."""
        standalone = tmp_path / "tagwatch.toml"
        standalone.write_text("[tagwatch]\n", encoding="utf-8")

        with patch("tagwatch.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == standalone

    def test_finds_pyproject_section(self, tmp_path: Path) -> None:
        """Test pyproject.toml is used only with a [tool.tagwatch] table."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tagwatch]\nprefix = 'X_'\n", encoding="utf-8")

        with patch("tagwatch.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == pyproject

    def test_ignores_unrelated_pyproject(self, tmp_path: Path) -> None:
        """Test pyproject.toml without a tagwatch table is ignored."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.black]\nline-length = 88\n", encoding="utf-8"
        )

        with patch("tagwatch.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_broken_pyproject_is_ignored(self, tmp_path: Path) -> None:
        """Test an unparsable pyproject.toml does not block discovery."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tagwatch\n", encoding="utf-8")

        assert _pyproject_has_tagwatch_section(pyproject) is False


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        """Test defaults are returned when nothing is found."""
        with patch("tagwatch.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config == GateConfig()

    def test_paths_relative_to_config_file(self, tmp_path: Path) -> None:
        """Test relative paths resolve against the config file directory."""
        project = tmp_path / "project"
        project.mkdir()
        config_file = project / "tagwatch.toml"
        config_file.write_text(
            "[tagwatch]\n"
            'template = "src/version.h.in"\n'
            'output = "build/version.h"\n'
            'working_dir = "."\n'
            'git_executable = "git"\n'
            "timeout = 5\n",
            encoding="utf-8",
        )

        config = load_config(config_file)

        assert config.template == (project / "src" / "version.h.in").resolve()
        assert config.output == (project / "build" / "version.h").resolve()
        assert config.working_dir == project.resolve()
        assert config.git_executable == Path("git")
        assert config.timeout == 5.0
        assert config.source_path == config_file.resolve()

    def test_pyproject_section(self, tmp_path: Path) -> None:
        """Test settings are read from [tool.tagwatch]."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tagwatch]\nprefix = 'APP_'\n", encoding="utf-8")

        config = load_config(pyproject)

        assert config.prefix == "APP_"

    def test_empty_section(self, tmp_path: Path) -> None:
        """Test a file without a tagwatch table yields defaults."""
        config_file = tmp_path / "tagwatch.toml"
        config_file.write_text("# nothing\n", encoding="utf-8")

        config = load_config(config_file)

        assert config.prefix == "GIT_TAG_VERSION_"
        assert config.source_path == config_file.resolve()


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_unknown_keys(self, tmp_path: Path) -> None:
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"state_file": "x"}, config_path=tmp_path / "t.toml")

        assert "state_file" in str(exc_info.value)

    @pytest.mark.parametrize(
        "section, option",
        [
            ({"template": 3}, "template"),
            ({"output": ""}, "output"),
            ({"prefix": 1}, "prefix"),
            ({"timeout": "10"}, "timeout"),
            ({"timeout": True}, "timeout"),
            ({"timeout": 0}, "timeout"),
        ],
    )
    def test_wrong_types(self, tmp_path: Path, section: dict, option: str) -> None:
        """Test values of the wrong type are rejected with the option name."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path=tmp_path / "t.toml")

        assert exc_info.value.option == option


@pytest.mark.unit
class TestValidatePrefix:
    """Tests for prefix validation."""

    @pytest.mark.parametrize("prefix", ["", "APP_", "_x", "GIT_TAG_VERSION_", "v2"])
    def test_accepts_identifier_prefixes(self, prefix: str) -> None:
        """Test prefixes that keep placeholders matchable are returned."""
        assert validate_prefix(prefix) == prefix

    @pytest.mark.parametrize("prefix", ["my-app_", "1_", "APP ", "app.", "@"])
    def test_rejects_unmatchable_prefixes(self, prefix: str) -> None:
        """Test prefixes that would make every placeholder unmatchable fail."""
        with pytest.raises(ConfigError) as exc_info:
            validate_prefix(prefix)

        assert exc_info.value.option == "prefix"

    def test_config_file_prefix_checked(self, tmp_path: Path) -> None:
        """Test a bad prefix in a config file is a ConfigError."""
        config_file = tmp_path / "tagwatch.toml"

        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"prefix": "my-app_"}, config_path=config_file)

        assert exc_info.value.option == "prefix"
        assert exc_info.value.config_path == str(config_file)


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml."""

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Test malformed TOML is a ConfigError."""
        broken = tmp_path / "tagwatch.toml"
        broken.write_text("[tagwatch\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(broken)

        assert "Invalid TOML" in str(exc_info.value)
