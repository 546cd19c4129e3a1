"""Run lint stages and aggregate their exit status."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from .checkers import discover_checkers
from .report import make_console, print_diffs

if TYPE_CHECKING:
    from .checkers.base import CheckResult, LintChecker
    from .config import LintConfig
    from .selection import FileSelection

LOGGER_NAME = "lint_runner"


@dataclass
class RunStats:
    """Statistics for one runner invocation."""

    start_time: datetime
    stages_run: int = 0
    stages_failed: int = 0
    files_checked: int = 0


class LintRunner:
    """Runs checkers over a root directory."""

    def __init__(self, config: LintConfig, console: Console | None = None) -> None:
        """Initialize the runner.

        Args:
            config: Lint configuration.
            console: Console diffs are printed to. Defaults to stdout.

        Raises:
            ConfigError: The configuration is invalid.

        """
        config.validate()
        self.config = config
        self.logger = self._setup_logging()
        self.console = console or make_console(config.color)
        self.checkers: list[LintChecker] = discover_checkers(config)
        self.stats = RunStats(start_time=datetime.now())

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the runner.

        Returns:
            Configured package logger.

        """
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(getattr(logging, self.config.log_level))

        # Clear existing handlers to avoid duplicates if the runner is recreated
        if logger.handlers:
            logger.handlers.clear()

        # Diagnostics go to stderr so stdout carries only tool output and diffs
        console_handler = RichHandler(
            console=make_console(self.config.color, stderr=True),
            show_time=False,
            show_path=False,
        )
        console_handler.setLevel(getattr(logging, self.config.log_level))
        logger.addHandler(console_handler)

        if self.config.log_file:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
            )
            logger.addHandler(file_handler)

        return logger

    def run_checker(
        self,
        checker: LintChecker,
        root: Path,
        selection: FileSelection | None = None,
    ) -> CheckResult:
        """Run a single stage.

        Args:
            checker: Stage to run.
            root: Directory to select files from.
            selection: Preselected files; selected from ``root`` if None.

        Returns:
            The stage result.

        Raises:
            ToolNotFoundError: The stage's external tool is not installed.

        """
        if selection is None:
            selection = checker.select(root)

        self.logger.info("Checking %d files with %s (%s)", len(selection), checker.tool, checker.name)
        result = checker.run(selection)

        if not self.config.quiet:
            print_diffs(result, self.console)

        self.stats.stages_run += 1
        self.stats.files_checked += len(result.outcomes)
        if result.ok:
            self.logger.info("%s: passed", checker.name)
        else:
            self.stats.stages_failed += 1
            self.logger.error("%s: failed (exit %d)", checker.name, result.exit_code)

        return result

    def run_all(self, root: Path) -> list[CheckResult]:
        """Run every enabled stage in order, stopping at the first failure.

        Args:
            root: Directory to lint.

        Returns:
            Results of the stages that ran.

        """
        self.logger.info("Linting all files under %s ...", root)
        results: list[CheckResult] = []

        for checker in self.checkers:
            result = self.run_checker(checker, root)
            results.append(result)
            if not result.ok:
                break

        return results

    @staticmethod
    def exit_code(results: list[CheckResult]) -> int:
        """Aggregate exit status: the first nonzero stage exit code, else 0."""
        for result in results:
            if not result.ok:
                return result.exit_code
        return 0
