"""Locate the external checkers and suggest how to install missing ones."""

from __future__ import annotations

import platform
import shutil
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import UnsupportedPlatformError

if TYPE_CHECKING:
    from .config import LintConfig

# Package names per package manager
_PACKAGES = {
    "clang-format": {"Darwin": "clang-format", "Linux": "clang-format"},
    "shellcheck": {"Darwin": "shellcheck", "Linux": "shellcheck"},
}

_INSTALLERS = {
    "Darwin": "brew install {package}",
    "Linux": "sudo apt-get install -y {package}",
}


@dataclass
class ToolStatus:
    """Availability of one external tool."""

    name: str
    executable: str
    path: str | None
    version: str | None
    install_hint: str  # empty when the tool is installed

    @property
    def available(self) -> bool:
        return self.path is not None


def install_hint(tool: str, system: str | None = None) -> str:
    """Return the install command for a tool on the given OS.

    Raises:
        UnsupportedPlatformError: No package manager is known for the OS.

    """
    system = system or platform.system()
    if system not in _INSTALLERS:
        raise UnsupportedPlatformError(system)
    package = _PACKAGES.get(tool, {}).get(system, tool)
    return _INSTALLERS[system].format(package=package)


def tool_version(path: str) -> str | None:
    """Ask a tool for its version string."""
    try:
        result = subprocess.run(
            [path, "--version"],
            capture_output=True,
            text=True,
            check=False,
        )
    except (subprocess.SubprocessError, OSError):
        return None

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    # shellcheck prints a banner first and "version: X" on its own line
    for line in lines:
        if line.lower().startswith("version:"):
            return line.partition(":")[2].strip()
    return lines[0] if lines else None


def check_tools(config: LintConfig, system: str | None = None) -> list[ToolStatus]:
    """Report availability of every external tool the checkers use.

    Raises:
        UnsupportedPlatformError: A tool is missing and no install command is
            known for the OS.

    """
    statuses: list[ToolStatus] = []

    for name, executable in (
        ("shellcheck", config.shell_executable),
        ("clang-format", config.cpp_executable),
    ):
        path = shutil.which(executable)
        statuses.append(
            ToolStatus(
                name=name,
                executable=executable,
                path=path,
                version=tool_version(path) if path else None,
                install_hint="" if path else install_hint(name, system),
            )
        )

    return statuses
