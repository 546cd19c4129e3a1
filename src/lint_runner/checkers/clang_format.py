"""C/C++ formatting checker backed by clang-format.

Each selected file is formatted to stdout and compared with its current
content. Files that differ are reported as a unified diff (check mode) or
rewritten by clang-format itself (fix mode). Files are processed by a
bounded pool of concurrent clang-format processes.
"""

from __future__ import annotations

import asyncio
import difflib
import logging
import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import ToolNotFoundError
from ..selection import FileSelection, load_ignore_file, select_sources
from .base import CheckResult, FileOutcome, OutcomeStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..config import LintConfig

# Exit codes, as used by run-clang-format
EXIT_CLEAN = 0
EXIT_DIFF = 1
EXIT_TROUBLE = 2

logger = logging.getLogger(__name__)


def make_diff(path: Path, original: str, formatted: str) -> str:
    """Build a unified diff between a file's content and its formatted form."""
    return "".join(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            formatted.splitlines(keepends=True),
            fromfile=f"{path}\t(original)",
            tofile=f"{path}\t(reformatted)",
            n=3,
        )
    )


class ClangFormatChecker:
    """Checks or fixes C/C++ formatting with clang-format."""

    CHECKER_ENABLED: bool = True
    name: str = "cpp"
    priority: int = 20

    def __init__(self, config: LintConfig) -> None:
        self.config = config
        self.tool = config.cpp_executable

    def excludes(self, root: Path) -> list[str]:
        """All exclusion patterns in effect for a root."""
        patterns = [*self.config.exclude, *self.config.cpp_exclude]
        if self.config.cpp_ignore_file:
            patterns.extend(load_ignore_file(root / self.config.cpp_ignore_file))
        return patterns

    def select(self, root: Path) -> FileSelection:
        """Select C/C++ sources under a root by extension."""
        return self.select_paths([root], recursive=True, root=root)

    def select_paths(
        self,
        paths: Iterable[Path],
        *,
        recursive: bool,
        root: Path | None = None,
    ) -> FileSelection:
        """Select C/C++ sources from explicit files and directories."""
        paths = list(paths)
        if root is None:
            root = next((p for p in paths if p.is_dir()), Path.cwd())
        return select_sources(
            paths,
            self.config.cpp_extensions,
            self.excludes(root),
            recursive=recursive,
            root=root,
        )

    def command(self, path: Path, *, in_place: bool = False) -> list[str]:
        """Build the clang-format command line for one file."""
        cmd = [self.tool]
        if self.config.cpp_style:
            cmd.append(f"--style={self.config.cpp_style}")
        if in_place:
            cmd.append("-i")
        cmd.append(str(path))
        return cmd

    def check_file(self, path: Path) -> FileOutcome:
        """Format one file and compare it with its current content.

        In fix mode an offending file is rewritten by ``clang-format -i``.

        Args:
            path: File to check.

        Returns:
            Outcome for the file.

        Raises:
            ToolNotFoundError: clang-format disappeared from the path.

        """
        try:
            original = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return FileOutcome(path=path, status=OutcomeStatus.ERROR, message=str(e))

        proc = self._invoke(self.command(path))
        if proc.returncode != 0:
            message = proc.stderr.strip() or f"{self.tool} exited {proc.returncode}"
            return FileOutcome(path=path, status=OutcomeStatus.ERROR, message=message)

        formatted = proc.stdout
        if formatted == original:
            return FileOutcome(path=path, status=OutcomeStatus.OK)

        diff = make_diff(path, original, formatted)
        if not self.config.cpp_in_place:
            return FileOutcome(path=path, status=OutcomeStatus.DIFF, diff=diff)

        proc = self._invoke(self.command(path, in_place=True))
        if proc.returncode != 0:
            message = proc.stderr.strip() or f"{self.tool} -i exited {proc.returncode}"
            return FileOutcome(path=path, status=OutcomeStatus.ERROR, diff=diff, message=message)

        logger.info("Reformatted: %s", path)
        return FileOutcome(path=path, status=OutcomeStatus.FIXED, diff=diff)

    def _invoke(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("Running: %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, encoding="utf-8", check=False)
        except FileNotFoundError as e:
            raise ToolNotFoundError(self.tool) from e

    async def check_all(self, selection: FileSelection) -> list[FileOutcome]:
        """Check every selected file with at most ``jobs`` concurrent workers.

        Returns:
            Outcomes in selection order.

        """
        semaphore = asyncio.Semaphore(self.config.jobs)

        async def _check(path: Path) -> FileOutcome:
            async with semaphore:
                return await asyncio.to_thread(self.check_file, path)

        return list(await asyncio.gather(*(_check(p) for p in selection.paths)))

    def run(self, selection: FileSelection) -> CheckResult:
        """Check (or fix) all selected files."""
        result = CheckResult(checker=self.name, exit_code=EXIT_CLEAN)

        if not selection:
            logger.info("No C/C++ sources found under %s", selection.root)
            result.skipped = True
            return result

        if self.config.cpp_dry_run:
            for path in selection.paths:
                logger.info("Would run: %s", " ".join(self.command(path, in_place=self.config.cpp_in_place)))
            return result

        if shutil.which(self.tool) is None:
            raise ToolNotFoundError(self.tool)

        logger.debug("Checking %d files with %d jobs", len(selection), self.config.jobs)
        result.outcomes = asyncio.run(self.check_all(selection))

        for outcome in result.outcomes:
            if outcome.status is OutcomeStatus.ERROR:
                logger.error("%s: %s", outcome.path, outcome.message)

        if result.count(OutcomeStatus.ERROR):
            result.exit_code = EXIT_TROUBLE
        elif result.count(OutcomeStatus.DIFF) or result.count(OutcomeStatus.FIXED):
            result.exit_code = EXIT_DIFF

        return result
