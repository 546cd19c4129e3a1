"""Shell script checker backed by shellcheck."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import ToolNotFoundError
from ..selection import FileSelection, select_shell_scripts
from .base import CheckResult, FileOutcome, OutcomeStatus

if TYPE_CHECKING:
    from ..config import LintConfig

# Header shellcheck's default tty format prints before each diagnostic
_FINDING_HEADER = re.compile(r"^In (?P<path>.+) line \d+:$", re.MULTILINE)

# shellcheck exit codes above this are tool errors, not findings
_MAX_FINDING_EXIT = 1

logger = logging.getLogger(__name__)


class ShellcheckChecker:
    """Selects shell scripts by shebang and runs shellcheck over them."""

    CHECKER_ENABLED: bool = True
    name: str = "shell"
    priority: int = 10

    def __init__(self, config: LintConfig) -> None:
        self.config = config
        self.tool = config.shell_executable

    def select(self, root: Path) -> FileSelection:
        """Select scripts whose first line declares a known shell."""
        return select_shell_scripts(root, self.config.shell_interpreters, self.config.exclude)

    def command(self, files: list[Path]) -> list[str]:
        """Build the shellcheck command line for a batch of files."""
        return [self.tool, *self.config.shell_args, *(str(f) for f in files)]

    def _batches(self, selection: FileSelection) -> list[list[Path]]:
        size = self.config.shell_batch_size
        paths = list(selection.paths)
        return [paths[i : i + size] for i in range(0, len(paths), size)]

    def run(self, selection: FileSelection) -> CheckResult:
        """Run shellcheck over the selection, stopping at the first failing batch."""
        result = CheckResult(checker=self.name, exit_code=0)

        if not selection:
            logger.info("No shell scripts found under %s", selection.root)
            result.skipped = True
            return result

        if shutil.which(self.tool) is None:
            raise ToolNotFoundError(self.tool)

        for batch in self._batches(selection):
            cmd = self.command(batch)
            logger.debug("Running: %s", " ".join(cmd))
            try:
                proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
            except FileNotFoundError as e:
                raise ToolNotFoundError(self.tool) from e

            if proc.stdout:
                sys.stdout.write(proc.stdout)
            if proc.stderr:
                sys.stderr.write(proc.stderr)

            result.outcomes.extend(self._outcomes(batch, proc))
            if proc.returncode != 0:
                result.exit_code = proc.returncode
                logger.debug("shellcheck exited %d, stopping", proc.returncode)
                break

        return result

    @staticmethod
    def _outcomes(batch: list[Path], proc: subprocess.CompletedProcess[str]) -> list[FileOutcome]:
        """Attribute a batch's result to its files."""
        if proc.returncode > _MAX_FINDING_EXIT:
            message = (proc.stderr or "").strip() or f"shellcheck exited {proc.returncode}"
            return [FileOutcome(path=p, status=OutcomeStatus.ERROR, message=message) for p in batch]

        flagged = {m.group("path") for m in _FINDING_HEADER.finditer(proc.stdout or "")}
        return [
            FileOutcome(path=p, status=OutcomeStatus.FINDING if str(p) in flagged else OutcomeStatus.OK)
            for p in batch
        ]
