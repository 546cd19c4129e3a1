"""Exceptions raised by the lint runner."""

from __future__ import annotations

# Exit status a POSIX shell reports for an unknown command.
COMMAND_NOT_FOUND = 127


class LintRunnerError(Exception):
    """Base error; carries the process exit code the CLI should return."""

    exit_code: int = 1


class ConfigError(LintRunnerError):
    """Invalid or unreadable configuration."""


class ToolNotFoundError(LintRunnerError):
    """An external checker is not on the execution path."""

    exit_code = COMMAND_NOT_FOUND

    def __init__(self, tool: str) -> None:
        super().__init__(f"{tool}: command not found")
        self.tool = tool


class UnsupportedPlatformError(LintRunnerError):
    """No install instructions exist for the running OS."""

    def __init__(self, system: str) -> None:
        super().__init__(f"Unsupported OS: {system}.")
        self.system = system
