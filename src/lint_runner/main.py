"""Main entry point for the lint runner."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.table import Table
from rich.text import Text

from .config import COLOR_CHOICES, LintConfig, find_repo_root, parse_extensions
from .exceptions import LintRunnerError
from .report import make_console, outcome_table, summary_table


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Returns:
        Configured parser.

    """
    parser = argparse.ArgumentParser(
        prog="lint-runner",
        description="Check shell scripts with shellcheck and C/C++ sources with clang-format",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Shell stage
    shell_parser = subparsers.add_parser("shell", help="Check shell scripts with shellcheck")
    shell_parser.add_argument(
        "-r",
        dest="root",
        type=Path,
        required=True,
        metavar="DIR",
        help="Directory to scan for shell scripts",
    )

    # C/C++ stage
    cpp_parser = subparsers.add_parser("cpp", help="Check or fix C/C++ formatting with clang-format")
    cpp_parser.add_argument("paths", nargs="+", type=Path, metavar="PATH", help="Files or directories")
    cpp_parser.add_argument("-r", "--recursive", action="store_true", help="Run recursively over directories")
    cpp_parser.add_argument("-i", "--in-place", action="store_true", help="Format files in place")
    cpp_parser.add_argument("-d", "--dry-run", action="store_true", help="Print the commands that would run")
    cpp_parser.add_argument("-j", "--jobs", type=int, default=None, help="Number of parallel jobs (default: CPUs + 1)")
    cpp_parser.add_argument("--style", default=None, help="Formatting style, forwarded to clang-format")
    cpp_parser.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Exclude paths matching the given glob-like pattern (repeatable)",
    )
    cpp_parser.add_argument(
        "--extensions",
        default=None,
        help="Comma separated list of file extensions",
    )
    cpp_parser.add_argument("--clang-format-executable", default=None, help="Path to the clang-format executable")
    cpp_parser.add_argument("-q", "--quiet", action="store_true", help="Disable output, useful for the exit code")
    cpp_parser.add_argument("--color", choices=COLOR_CHOICES, default=None, help="Show colored diff")

    # Aggregate run
    all_parser = subparsers.add_parser("all", help="Run every stage, stopping at the first failure")
    all_parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory to lint (default: repository root)",
    )

    # Tools command
    subparsers.add_parser("tools", help="Show which external checkers are installed")

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser


def _config_root(args: argparse.Namespace) -> Path | None:
    """Directory the configuration file is looked up from."""
    if getattr(args, "root", None):
        return args.root
    for path in getattr(args, "paths", None) or []:
        if path.is_dir():
            return path
    return None


def cmd_shell(config: LintConfig, args: argparse.Namespace) -> int:
    """Execute the shell stage.

    Args:
        config: Lint configuration.
        args: Parsed arguments.

    Returns:
        shellcheck's exit code.

    """
    from .checkers import get_checker
    from .runner import LintRunner

    if not args.root.is_dir():
        make_console(config.color, stderr=True).print(f"[red]Not a directory: {args.root}[/red]")
        return 1

    runner = LintRunner(config)
    result = runner.run_checker(get_checker(config, "shell"), args.root)
    return result.exit_code


def cmd_cpp(config: LintConfig, args: argparse.Namespace) -> int:
    """Execute the C/C++ stage.

    Args:
        config: Lint configuration.
        args: Parsed arguments.

    Returns:
        0 when clean, 1 when files differ or were rewritten, 2 on formatter errors.

    """
    from .checkers import get_checker
    from .runner import LintRunner

    config.cpp_in_place = args.in_place
    config.cpp_dry_run = args.dry_run
    config.cpp_exclude.extend(args.exclude)
    config.quiet = config.quiet or args.quiet
    if args.jobs is not None:
        config.cpp_jobs = args.jobs
    if args.style is not None:
        config.cpp_style = args.style
    if args.extensions is not None:
        config.cpp_extensions = parse_extensions(args.extensions)
    if args.clang_format_executable is not None:
        config.cpp_executable = args.clang_format_executable
    if args.color is not None:
        config.color = args.color

    runner = LintRunner(config)
    checker = get_checker(config, "cpp")
    selection = checker.select_paths(args.paths, recursive=args.recursive)
    result = runner.run_checker(checker, selection.root, selection)
    return result.exit_code


def cmd_all(config: LintConfig, args: argparse.Namespace) -> int:
    """Execute every stage in order.

    Args:
        config: Lint configuration.
        args: Parsed arguments.

    Returns:
        Exit code of the first failing stage, or 0.

    """
    from .runner import LintRunner

    root = args.root or find_repo_root()
    runner = LintRunner(config)
    results = runner.run_all(root)

    if not config.quiet:
        console = make_console(config.color, stderr=True)
        console.print(summary_table(results))
        for result in results:
            if result.outcomes and not result.ok:
                console.print(outcome_table(result))

    return runner.exit_code(results)


def cmd_tools(config: LintConfig, args: argparse.Namespace) -> int:
    """Execute tools command.

    Returns:
        0 if every tool is installed, 1 otherwise.

    """
    from .tools import check_tools

    console = make_console(config.color)
    statuses = check_tools(config)

    table = Table(title="External checkers")
    table.add_column("Tool", style="cyan")
    table.add_column("Path")
    table.add_column("Version", style="dim")
    table.add_column("Install", style="yellow")

    for status in statuses:
        table.add_row(
            status.name,
            status.path or "[red]not found[/red]",
            status.version or "",
            "" if status.available else status.install_hint,
        )

    console.print(table)
    return 0 if all(s.available for s in statuses) else 1


def cmd_config(config: LintConfig, args: argparse.Namespace) -> int:
    """Execute config command.

    Args:
        config: Lint configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = make_console(config.color)

    if args.init:
        config_path = args.config or LintConfig.get_config_path()
        if config_path.exists():
            console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
            return 1
        config.save(config_path)
        console.print(f"[green]Created config: {config_path}[/green]")
        return 0

    if args.show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Exclude", "\n".join(config.exclude))
        table.add_row("Disabled checkers", ", ".join(config.checkers_disabled) or "-")
        table.add_row("Shell interpreters", ", ".join(config.shell_interpreters))
        table.add_row("shellcheck", " ".join([config.shell_executable, *config.shell_args]))
        table.add_row("clang-format", config.cpp_executable)
        table.add_row("Extensions", ",".join(config.cpp_extensions))
        table.add_row("Style", config.cpp_style or "file")
        table.add_row("Jobs", str(config.jobs))
        table.add_row("C/C++ exclude", "\n".join(config.cpp_exclude) or "-")
        table.add_row("Log level", config.log_level)
        table.add_row("Log file", str(config.log_file) if config.log_file else "-")

        console.print(table)
        return 0

    console.print("[yellow]Use --init or --show[/yellow]")
    return 1


COMMANDS = {
    "shell": cmd_shell,
    "cpp": cmd_cpp,
    "all": cmd_all,
    "tools": cmd_tools,
    "config": cmd_config,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_usage(sys.stderr)
        return 1

    try:
        config = LintConfig.load(args.config, root=_config_root(args))
        if args.verbose:
            config.log_level = "DEBUG"
        return COMMANDS[args.command](config, args)
    except LintRunnerError as e:
        make_console("auto", stderr=True).print(Text(str(e), style="red"))
        return e.exit_code


def lint_bash() -> int:
    """Console entry point for the shell stage."""
    return main(["shell", *sys.argv[1:]])


def lint_cpp() -> int:
    """Console entry point for the C/C++ stage."""
    return main(["cpp", *sys.argv[1:]])


def lint_all() -> int:
    """Console entry point for the aggregate run."""
    return main(["all", *sys.argv[1:]])


if __name__ == "__main__":
    sys.exit(main())
