"""Base protocol and types for checker modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..selection import FileSelection


class OutcomeStatus(Enum):
    """What the external tool reported for one file."""

    OK = "ok"
    DIFF = "diff"  # Would be reformatted (check mode)
    FIXED = "fixed"  # Rewritten in place (fix mode)
    FINDING = "finding"  # Diagnostic reported
    ERROR = "error"  # Tool failed on the file


@dataclass(frozen=True)
class FileOutcome:
    """Immutable record of one checked file."""

    path: Path
    status: OutcomeStatus
    diff: str | None = None
    message: str | None = None


@dataclass
class CheckResult:
    """Aggregate result of one checker invocation."""

    checker: str
    exit_code: int
    outcomes: list[FileOutcome] = field(default_factory=list)
    skipped: bool = False  # Nothing selected, tool never invoked

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def count(self, status: OutcomeStatus) -> int:
        """Number of outcomes with the given status."""
        return sum(1 for outcome in self.outcomes if outcome.status is status)


@runtime_checkable
class LintChecker(Protocol):
    """Interface for pluggable lint stages."""

    CHECKER_ENABLED: bool
    name: str
    priority: int  # Lower runs first in the aggregate run
    tool: str  # Executable the checker delegates to

    def select(self, root: Path) -> FileSelection:
        """Select the files this checker covers under a root.

        Args:
            root: Directory to scan.

        Returns:
            Ordered file selection.

        """
        ...

    def run(self, selection: FileSelection) -> CheckResult:
        """Run the external tool over a selection.

        Args:
            selection: Files to check.

        Returns:
            Aggregate result; ``exit_code`` is 0 only if every file passed.

        Raises:
            ToolNotFoundError: The external tool is not installed.

        """
        ...
