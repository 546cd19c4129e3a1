"""Discover the files a checker should run over."""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Longest first line read when looking for an interpreter declaration
_SHEBANG_READ_LIMIT = 1024


@dataclass(frozen=True)
class FileSelection:
    """Ordered set of files under a root, computed fresh for each run."""

    root: Path
    paths: tuple[Path, ...]

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __bool__(self) -> bool:
        return bool(self.paths)


class ExcludeMatcher:
    """Match paths against fnmatch-style exclusion patterns.

    A pattern excludes a path when it matches the path as given (as the walk
    produced it, so relative to the working directory for relative
    arguments), the absolute path, the path relative to the root or to one
    of the extra ``bases``, or any single component of such a relative path.
    Ancestors are checked as well, so excluding a directory excludes its
    whole subtree.
    """

    def __init__(self, root: Path, patterns: Iterable[str], *, bases: Iterable[Path] = ()) -> None:
        self.root = Path(os.path.abspath(root))
        self.bases = tuple(dict.fromkeys([self.root, *(Path(os.path.abspath(b)) for b in bases)]))
        self.patterns = tuple(os.path.normpath(p) if os.sep in p else p for p in patterns if p)

    def _match_any(self, forms: Iterable[str]) -> bool:
        return any(fnmatch.fnmatch(form, pattern) for form in forms for pattern in self.patterns)

    def _matches(self, path: Path) -> bool:
        absolute = Path(os.path.abspath(path))
        forms = {Path(os.path.normpath(path)).as_posix(), str(absolute)}

        under_base = False
        for base in self.bases:
            try:
                relative = absolute.relative_to(base)
            except ValueError:
                continue
            under_base = True
            if relative.parts:
                forms.add(relative.as_posix())
                forms.update(relative.parts)
        if not under_base:
            forms.add(absolute.name)

        return self._match_any(forms)

    def _below_base(self, path: Path) -> bool:
        return any(base in path.parents for base in self.bases)

    def is_excluded(self, path: Path) -> bool:
        """Check whether ``path`` or one of its ancestors below a base is excluded."""
        if not self.patterns:
            return False
        if self._matches(path):
            return True
        # Directories leading to the path as it was spelled on the command line
        given = Path(os.path.normpath(path))
        if self._match_any(p.as_posix() for p in given.parents if p.name):
            return True
        for parent in Path(os.path.abspath(path)).parents:
            if not self._below_base(parent):
                break
            if self._matches(parent):
                return True
        return False


def shebang_pattern(interpreters: Iterable[str]) -> re.Pattern[str]:
    """Compile the interpreter-declaration pattern for the given shell names.

    Matches ``#!/bin/bash`` as well as ``#!/usr/bin/env bash``; the
    interpreter name must be a whole word.
    """
    names = "|".join(re.escape(name) for name in interpreters)
    return re.compile(rf"^#!(.*/|.*env +)({names})\b")


def read_first_line(path: Path) -> str:
    """Read the first line of a file, decoding leniently."""
    with path.open("rb") as f:
        line = f.readline(_SHEBANG_READ_LIMIT)
    return line.decode("utf-8", errors="replace").rstrip("\r\n")


def walk_files(root: Path, matcher: ExcludeMatcher) -> Iterator[Path]:
    """Yield regular files under ``root``, pruning excluded directories.

    Symlinks are not followed, matching ``grep -r``.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        dirnames[:] = sorted(d for d in dirnames if not matcher.is_excluded(current / d))
        for filename in sorted(filenames):
            path = current / filename
            if path.is_symlink() or matcher.is_excluded(path):
                continue
            yield path


def select_shell_scripts(
    root: Path,
    interpreters: Iterable[str],
    exclude: Iterable[str],
) -> FileSelection:
    """Select shell scripts under ``root`` by their first line.

    Args:
        root: Directory to scan.
        interpreters: Recognized shell names (``sh``, ``bash``, ...).
        exclude: Exclusion patterns.

    Returns:
        Sorted selection of matching scripts.

    """
    pattern = shebang_pattern(interpreters)
    matcher = ExcludeMatcher(root, exclude)
    selected: list[Path] = []

    for path in walk_files(root, matcher):
        try:
            first_line = read_first_line(path)
        except OSError:
            logger.debug("Cannot read: %s", path)
            continue
        if pattern.match(first_line):
            selected.append(path)

    logger.debug("Selected %d shell scripts under %s", len(selected), root)
    return FileSelection(root=root, paths=tuple(sorted(selected, key=str)))


def has_extension(path: Path, extensions: Iterable[str]) -> bool:
    """Check a filename extension against an allow-list (case-sensitive)."""
    return os.path.splitext(path.name)[1][1:] in set(extensions)


def select_sources(
    paths: Iterable[Path],
    extensions: Iterable[str],
    exclude: Iterable[str],
    *,
    recursive: bool = True,
    root: Path | None = None,
) -> FileSelection:
    """Select source files from explicit files and directories.

    Files named explicitly are kept whatever their extension; directories
    are walked (when ``recursive``) and filtered by the extension allow-list.

    Args:
        paths: Files and directories given on the command line.
        extensions: Allowed extensions without the leading dot.
        exclude: Exclusion patterns.
        recursive: Walk directories.
        root: Root used for relative exclusion matching. Defaults to the
            first directory in ``paths`` or the current directory. Each
            directory argument is also a base for relative matching while
            it is walked.

    Returns:
        Sorted, de-duplicated selection.

    """
    paths = list(paths)
    allowed = set(extensions)
    exclude = list(exclude)
    if root is None:
        root = next((p for p in paths if p.is_dir()), Path.cwd())
    selected: set[Path] = set()

    for path in paths:
        matcher = ExcludeMatcher(root, exclude, bases=[path] if path.is_dir() else [])
        if matcher.is_excluded(path):
            logger.debug("Excluded: %s", path)
            continue
        if path.is_dir():
            if not recursive:
                logger.warning("Skipping directory %s (use -r to recurse)", path)
                continue
            selected.update(p for p in walk_files(path, matcher) if has_extension(p, allowed))
        else:
            selected.add(path)

    ordered = tuple(sorted(selected, key=str))
    logger.debug("Selected %d source files", len(ordered))
    return FileSelection(root=root, paths=ordered)


def load_ignore_file(path: Path) -> list[str]:
    """Read exclusion patterns from a ``.clang-format-ignore`` style file.

    Blank lines and ``#`` comments are skipped. A missing file yields no
    patterns.
    """
    if not path.is_file():
        return []
    patterns: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns
