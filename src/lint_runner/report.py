"""Render check results to the terminal."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .checkers.base import OutcomeStatus

if TYPE_CHECKING:
    from .checkers.base import CheckResult

_STATUS_STYLES = {
    OutcomeStatus.OK: "green",
    OutcomeStatus.DIFF: "yellow",
    OutcomeStatus.FIXED: "cyan",
    OutcomeStatus.FINDING: "red",
    OutcomeStatus.ERROR: "bold red",
}


def make_console(color: str = "auto", *, stderr: bool = False) -> Console:
    """Create a console honoring ``auto``/``always``/``never`` coloring."""
    file = sys.stderr if stderr else sys.stdout
    if color == "always":
        return Console(file=file, force_terminal=True, highlight=False)
    if color == "never":
        return Console(file=file, no_color=True, highlight=False)
    return Console(file=file, highlight=False)


def colorize_diff(diff: str) -> Text:
    """Style a unified diff line by line."""
    text = Text()
    for line in diff.splitlines(keepends=True):
        if line.startswith(("+++", "---")):
            text.append(line, style="bold")
        elif line.startswith("@@"):
            text.append(line, style="cyan")
        elif line.startswith("+"):
            text.append(line, style="green")
        elif line.startswith("-"):
            text.append(line, style="red")
        else:
            text.append(line)
    if diff and not diff.endswith("\n"):
        text.append("\n")
    return text


def print_diffs(result: CheckResult, console: Console) -> None:
    """Print the unified diff of every file that needed reformatting."""
    for outcome in result.outcomes:
        if outcome.diff and outcome.status in (OutcomeStatus.DIFF, OutcomeStatus.FIXED):
            console.print(colorize_diff(outcome.diff), end="", soft_wrap=True)


def summary_table(results: list[CheckResult]) -> Table:
    """Build a per-stage summary table."""
    table = Table(title="Lint summary")
    table.add_column("Stage", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Problems", justify="right")
    table.add_column("Exit", justify="right")

    for result in results:
        problems = sum(
            result.count(status)
            for status in (OutcomeStatus.DIFF, OutcomeStatus.FIXED, OutcomeStatus.FINDING, OutcomeStatus.ERROR)
        )
        exit_style = "green" if result.ok else "red"
        table.add_row(
            result.checker,
            "-" if result.skipped else str(len(result.outcomes)),
            str(problems),
            Text(str(result.exit_code), style=exit_style),
        )

    return table


def outcome_table(result: CheckResult) -> Table:
    """Build a per-file table for one stage, omitting passing files."""
    table = Table(title=f"{result.checker}: files with problems")
    table.add_column("File", style="dim")
    table.add_column("Status")
    table.add_column("Message")

    for outcome in result.outcomes:
        if outcome.status is OutcomeStatus.OK:
            continue
        table.add_row(
            str(outcome.path),
            Text(outcome.status.value, style=_STATUS_STYLES[outcome.status]),
            outcome.message or "",
        )

    return table
