"""Tests for configuration loading and saving."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from lint_runner.config import (
    DEFAULT_CPP_EXTENSIONS,
    LintConfig,
    find_repo_root,
    parse_bool,
    parse_extensions,
)
from lint_runner.exceptions import ConfigError


class TestParseBool:
    """Tests for boolean parsing helper."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            ("True", True),
            ("yes", True),
            ("on", True),
            ("1", True),
            ("false", False),
            ("no", False),
            ("off", False),
            ("0", False),
            ("random", False),  # Non-standard strings are False
            ("", False),
        ],
    )
    def test_parse_bool_values(self, value: bool | str, expected: bool) -> None:
        """Test parsing various boolean representations."""
        assert parse_bool(value, False) == expected

    def test_parse_bool_none_uses_default(self) -> None:
        """Test that None returns the default value."""
        assert parse_bool(None, True) is True
        assert parse_bool(None, False) is False

    def test_parse_bool_integer(self) -> None:
        """Test parsing integer values."""
        assert parse_bool(1, False) is True
        assert parse_bool(0, True) is False


class TestParseExtensions:
    """Tests for extension list normalization."""

    def test_comma_separated(self) -> None:
        assert parse_extensions("c, h,.cpp") == ["c", "h", "cpp"]

    def test_list(self) -> None:
        assert parse_extensions(["cc", ".hh", ""]) == ["cc", "hh"]


class TestLintConfigDefaults:
    """Tests for default configuration values."""

    def test_default_values(self) -> None:
        """Test that defaults match the stock shell tooling."""
        config = LintConfig()

        assert config.exclude == [".git"]
        assert config.shell_interpreters == ["sh", "bash", "ksh", "zsh"]
        assert config.shell_executable == "shellcheck"
        assert config.shell_args == ["-x"]
        assert config.cpp_executable == "clang-format"
        assert config.cpp_style is None
        assert config.cpp_in_place is False
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_default_extensions(self) -> None:
        """Test the C/C++ extension allow-list."""
        config = LintConfig()
        assert config.cpp_extensions == list(DEFAULT_CPP_EXTENSIONS)
        assert set(config.cpp_extensions) == {
            "c", "h", "C", "H", "cpp", "hpp", "cc", "hh", "c++", "h++", "cxx", "hxx",
        }

    def test_default_jobs_is_cpu_count_plus_one(self) -> None:
        """Test the default worker count."""
        import os

        config = LintConfig()
        assert config.jobs == (os.cpu_count() or 1) + 1

    def test_explicit_jobs(self) -> None:
        config = LintConfig(cpp_jobs=3)
        assert config.jobs == 3

    def test_mutable_defaults_not_shared(self) -> None:
        """Test that list defaults are independent per instance."""
        first = LintConfig()
        second = LintConfig()
        first.exclude.append("vendor")
        assert second.exclude == [".git"]


class TestConfigLoad:
    """Tests for loading configuration from file."""

    def test_load_nonexistent_file(self, tmp_path: Path) -> None:
        """Test loading returns defaults when file doesn't exist."""
        config = LintConfig.load(tmp_path / "nonexistent.yaml")
        assert config.exclude == [".git"]

    def test_load_empty_file(self, tmp_path: Path) -> None:
        """Test loading empty file returns defaults."""
        config_path = tmp_path / "empty.yaml"
        config_path.touch()

        config = LintConfig.load(config_path)

        assert config.shell_executable == "shellcheck"

    def test_load_partial_config(self, tmp_path: Path) -> None:
        """Test loading partial config merges with defaults."""
        config_path = tmp_path / "partial.yaml"
        config_path.write_text("cpp:\n  style: Google\n")

        config = LintConfig.load(config_path)

        assert config.cpp_style == "Google"
        assert config.cpp_executable == "clang-format"  # Default

    def test_load_full_config(self, tmp_path: Path) -> None:
        """Test loading full configuration."""
        config_path = tmp_path / "full.yaml"
        data = {
            "exclude": [".git", "build"],
            "checkers_disabled": ["cpp"],
            "color": "never",
            "quiet": "yes",
            "shell": {
                "interpreters": ["bash"],
                "executable": "/opt/shellcheck",
                "args": ["-x", "-S", "warning"],
                "batch_size": 10,
            },
            "cpp": {
                "executable": "clang-format-17",
                "extensions": "cpp,hpp",
                "style": "file",
                "jobs": 4,
                "exclude": ["src/third_party/qux.cpp"],
                "ignore_file": ".fmtignore",
            },
            "logging": {
                "level": "debug",
                "file": "~/logs/lint.log",
            },
        }
        with config_path.open("w") as f:
            yaml.dump(data, f)

        config = LintConfig.load(config_path)

        assert config.exclude == [".git", "build"]
        assert config.checkers_disabled == ["cpp"]
        assert config.color == "never"
        assert config.quiet is True
        assert config.shell_interpreters == ["bash"]
        assert config.shell_executable == "/opt/shellcheck"
        assert config.shell_args == ["-x", "-S", "warning"]
        assert config.shell_batch_size == 10
        assert config.cpp_executable == "clang-format-17"
        assert config.cpp_extensions == ["cpp", "hpp"]
        assert config.cpp_style == "file"
        assert config.cpp_jobs == 4
        assert config.cpp_exclude == ["src/third_party/qux.cpp"]
        assert config.cpp_ignore_file == ".fmtignore"
        assert config.log_level == "DEBUG"
        assert config.log_file == Path.home() / "logs/lint.log"

    def test_load_from_repo_root(self, tmp_path: Path) -> None:
        """Test the default path is .lint-runner.yaml at the repository root."""
        (tmp_path / ".git").mkdir()
        (tmp_path / ".lint-runner.yaml").write_text("shell:\n  executable: sc\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        config = LintConfig.load(root=nested)

        assert config.shell_executable == "sc"

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test that malformed YAML is reported as a ConfigError."""
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("exclude: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            LintConfig.load(config_path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="Expected a mapping"):
            LintConfig.load(config_path)

    def test_invalid_log_level_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / "level.yaml"
        config_path.write_text("logging:\n  level: LOUD\n")

        with pytest.raises(ConfigError, match="Invalid log_level"):
            LintConfig.load(config_path)

    def test_invalid_color_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / "color.yaml"
        config_path.write_text("color: sometimes\n")

        with pytest.raises(ConfigError, match="Invalid color"):
            LintConfig.load(config_path)

    def test_zero_jobs_uses_default(self, tmp_path: Path) -> None:
        """Test that jobs: 0 selects CPU count + 1 workers."""
        import os

        config_path = tmp_path / "jobs.yaml"
        config_path.write_text("cpp:\n  jobs: 0\n")

        config = LintConfig.load(config_path)

        assert config.cpp_jobs == 0
        assert config.jobs == (os.cpu_count() or 1) + 1

    def test_negative_jobs_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / "jobs.yaml"
        config_path.write_text("cpp:\n  jobs: -2\n")

        with pytest.raises(ConfigError, match="cpp.jobs"):
            LintConfig.load(config_path)

    @pytest.mark.parametrize(
        "content,key",
        [
            ("shell:\n  batch_size: many\n", "shell.batch_size"),
            ("cpp:\n  jobs: lots\n", "cpp.jobs"),
            ("cpp:\n  jobs: true\n", "cpp.jobs"),
            ("cpp:\n  jobs: [1, 2]\n", "cpp.jobs"),
        ],
    )
    def test_non_integer_count_raises(self, tmp_path: Path, content: str, key: str) -> None:
        """Test that bad counts surface as ConfigError, not ValueError."""
        config_path = tmp_path / "count.yaml"
        config_path.write_text(content)

        with pytest.raises(ConfigError, match=key):
            LintConfig.load(config_path)

    def test_scalar_becomes_single_item_list(self, tmp_path: Path) -> None:
        """Test that a lone string is one pattern, not a list of characters."""
        config_path = tmp_path / "scalar.yaml"
        config_path.write_text("exclude: .git\nshell:\n  interpreters: bash\ncpp:\n  exclude: third_party\n")

        config = LintConfig.load(config_path)

        assert config.exclude == [".git"]
        assert config.shell_interpreters == ["bash"]
        assert config.cpp_exclude == ["third_party"]

    def test_mapping_where_list_expected_raises(self, tmp_path: Path) -> None:
        config_path = tmp_path / "mapping.yaml"
        config_path.write_text("exclude:\n  vendor: true\n")

        with pytest.raises(ConfigError, match="exclude must be a list"):
            LintConfig.load(config_path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        config_path = tmp_path / "section.yaml"
        config_path.write_text("shell: bash\n")

        with pytest.raises(ConfigError, match="shell must be a mapping"):
            LintConfig.load(config_path)


class TestConfigSave:
    """Tests for saving configuration."""

    def test_save_creates_parent_dirs(self, tmp_path: Path) -> None:
        config_path = tmp_path / "nested" / "dir" / "config.yaml"
        LintConfig().save(config_path)
        assert config_path.exists()

    def test_saved_config_reloads(self, tmp_path: Path) -> None:
        """Test that a saved config loads back with the same values."""
        config_path = tmp_path / "config.yaml"
        original = LintConfig(
            exclude=[".git", "vendor"],
            cpp_style="LLVM",
            cpp_jobs=2,
            cpp_exclude=["third_party/qux.cpp"],
            log_file=tmp_path / "lint.log",
        )
        original.save(config_path)

        loaded = LintConfig.load(config_path)

        assert loaded.exclude == [".git", "vendor"]
        assert loaded.cpp_style == "LLVM"
        assert loaded.cpp_jobs == 2
        assert loaded.cpp_exclude == ["third_party/qux.cpp"]
        assert loaded.cpp_extensions == list(DEFAULT_CPP_EXTENSIONS)
        assert loaded.log_file == tmp_path / "lint.log"


class TestFindRepoRoot:
    """Tests for repository root discovery."""

    def test_finds_git_ancestor(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "src" / "deep"
        nested.mkdir(parents=True)

        assert find_repo_root(nested) == tmp_path.resolve()

    def test_git_file_counts(self, tmp_path: Path) -> None:
        """Test that a .git file (worktree or submodule) marks the root."""
        (tmp_path / ".git").write_text("gitdir: elsewhere\n")
        assert find_repo_root(tmp_path) == tmp_path.resolve()

    def test_falls_back_to_start(self, tmp_path: Path) -> None:
        start = tmp_path / "no-repo"
        start.mkdir()
        # tmp_path is not inside a repository in a normal test run
        root = find_repo_root(start)
        assert root == start.resolve() or (root / ".git").exists()
