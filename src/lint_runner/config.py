"""Configuration management for the lint runner."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError

CONFIG_FILENAME = ".lint-runner.yaml"

DEFAULT_SHELL_INTERPRETERS = ("sh", "bash", "ksh", "zsh")
DEFAULT_CPP_EXTENSIONS = ("c", "h", "C", "H", "cpp", "hpp", "cc", "hh", "c++", "h++", "cxx", "hxx")
COLOR_CHOICES = ("auto", "always", "never")

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a YAML/env boolean, falling back to ``default`` for None."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def parse_extensions(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """Normalize ``"c,h,cpp"`` or a list into bare extensions (no dots)."""
    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip().lstrip(".") for item in items if item.strip()]


def find_repo_root(start: Path | None = None) -> Path:
    """Return the nearest ancestor of ``start`` holding a ``.git`` entry.

    Falls back to ``start`` itself when no repository is found.
    """
    start = (start or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return start


def _as_list(value: Any, key: str) -> list[str]:
    """Coerce a YAML value to a list of strings; a lone scalar is one item."""
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    if isinstance(value, list):
        return [str(item) for item in value]
    raise ConfigError(f"{key} must be a list, got {type(value).__name__}")


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{key} must be a mapping, got {type(section).__name__}")
    return section


@dataclass
class LintConfig:
    """Configuration for a lint run."""

    # Patterns excluded from every stage (fnmatch against path or component)
    exclude: list[str] = field(default_factory=lambda: [".git"])

    # Checkers skipped by the aggregate run
    checkers_disabled: list[str] = field(default_factory=list)

    # Shell stage
    shell_interpreters: list[str] = field(default_factory=lambda: list(DEFAULT_SHELL_INTERPRETERS))
    shell_executable: str = "shellcheck"
    shell_args: list[str] = field(default_factory=lambda: ["-x"])
    shell_batch_size: int = 200

    # C/C++ stage
    cpp_executable: str = "clang-format"
    cpp_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_CPP_EXTENSIONS))
    cpp_style: str | None = None
    cpp_jobs: int | None = None  # None or 0 -> CPU count + 1
    cpp_exclude: list[str] = field(default_factory=list)
    cpp_ignore_file: str = ".clang-format-ignore"
    cpp_in_place: bool = False
    cpp_dry_run: bool = False

    # Output
    color: str = "auto"
    quiet: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    @property
    def jobs(self) -> int:
        """Worker count for the C/C++ stage."""
        if self.cpp_jobs:
            return self.cpp_jobs
        return (os.cpu_count() or 1) + 1

    @classmethod
    def get_config_path(cls, root: Path | None = None) -> Path:
        """Get the default configuration file path for a repository root."""
        return find_repo_root(root) / CONFIG_FILENAME

    @classmethod
    def load(cls, config_path: Path | None = None, root: Path | None = None) -> LintConfig:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to config file. Uses ``<repo root>/.lint-runner.yaml`` if None.
            root: Directory the repository root is searched from.

        Returns:
            Loaded configuration.

        Raises:
            ConfigError: The file is not valid YAML or holds invalid values.

        """
        if config_path is None:
            config_path = cls.get_config_path(root)

        if not config_path.exists():
            return cls()

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> LintConfig:
        """Create config from dictionary.

        Raises:
            ConfigError: A value has the wrong type.

        """
        config = cls()

        if "exclude" in data:
            config.exclude = _as_list(data["exclude"], "exclude")
        if "checkers_disabled" in data:
            config.checkers_disabled = _as_list(data["checkers_disabled"], "checkers_disabled")
        if "color" in data:
            config.color = str(data["color"])
        if "quiet" in data:
            config.quiet = parse_bool(data["quiet"], config.quiet)

        # Shell stage
        shell = _section(data, "shell")
        if "interpreters" in shell:
            config.shell_interpreters = _as_list(shell["interpreters"], "shell.interpreters")
        if "executable" in shell:
            config.shell_executable = str(shell["executable"])
        if "args" in shell:
            config.shell_args = _as_list(shell["args"], "shell.args")
        if "batch_size" in shell:
            config.shell_batch_size = _as_int(shell["batch_size"], "shell.batch_size")

        # C/C++ stage
        cpp = _section(data, "cpp")
        if "executable" in cpp:
            config.cpp_executable = str(cpp["executable"])
        if "extensions" in cpp:
            extensions = cpp["extensions"]
            if not isinstance(extensions, str):
                extensions = _as_list(extensions, "cpp.extensions")
            config.cpp_extensions = parse_extensions(extensions)
        if "style" in cpp:
            config.cpp_style = str(cpp["style"]) if cpp["style"] is not None else None
        if "jobs" in cpp:
            config.cpp_jobs = _as_int(cpp["jobs"], "cpp.jobs") if cpp["jobs"] is not None else None
        if "exclude" in cpp:
            config.cpp_exclude = [os.path.expanduser(p) for p in _as_list(cpp["exclude"], "cpp.exclude")]
        if "ignore_file" in cpp:
            config.cpp_ignore_file = str(cpp["ignore_file"])

        # Logging
        logging_cfg = _section(data, "logging")
        if "level" in logging_cfg:
            config.log_level = str(logging_cfg["level"]).upper()
        if logging_cfg.get("file"):
            config.log_file = Path(os.path.expanduser(str(logging_cfg["file"])))

        config.validate()
        return config

    def validate(self) -> None:
        """Reject values the runner cannot act on.

        Raises:
            ConfigError: On the first invalid value.

        """
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Invalid log_level: {self.log_level}")
        if self.color not in COLOR_CHOICES:
            raise ConfigError(f"Invalid color: {self.color} (expected one of {', '.join(COLOR_CHOICES)})")
        if self.shell_batch_size < 1:
            raise ConfigError("shell.batch_size must be at least 1")
        # 0 selects the default worker count
        if self.cpp_jobs is not None and self.cpp_jobs < 0:
            raise ConfigError("cpp.jobs must not be negative")
        if not self.shell_interpreters:
            raise ConfigError("shell.interpreters must not be empty")

    def save(self, config_path: Path) -> None:
        """Save configuration to a YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "exclude": list(self.exclude),
            "checkers_disabled": list(self.checkers_disabled),
            "color": self.color,
            "quiet": self.quiet,
            "shell": {
                "interpreters": list(self.shell_interpreters),
                "executable": self.shell_executable,
                "args": list(self.shell_args),
                "batch_size": self.shell_batch_size,
            },
            "cpp": {
                "executable": self.cpp_executable,
                "extensions": ",".join(self.cpp_extensions),
                "style": self.cpp_style,
                "jobs": self.cpp_jobs,
                "exclude": list(self.cpp_exclude),
                "ignore_file": self.cpp_ignore_file,
            },
            "logging": {
                "level": self.log_level,
                "file": str(self.log_file) if self.log_file else None,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
