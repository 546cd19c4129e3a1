"""Pluggable lint stages with auto-discovery."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import types
from typing import TYPE_CHECKING

from .base import LintChecker

if TYPE_CHECKING:
    from ..config import LintConfig

logger = logging.getLogger(__name__)


def discover_checkers(config: LintConfig) -> list[LintChecker]:
    """Discover and instantiate all enabled checkers, in run order.

    Scans the checkers package for classes with CHECKER_ENABLED = True,
    instantiates them with the config, filters out checkers disabled by
    config and sorts the rest by priority.
    """
    checkers: list[LintChecker] = []
    package = importlib.import_module(__package__ or "lint_runner.checkers")

    for _finder, module_name, _is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name == "base":
            continue
        try:
            mod = importlib.import_module(f"{package.__name__}.{module_name}")
        except ImportError:
            logger.warning("Failed to import checker module: %s", module_name)
            continue

        checkers.extend(_find_checker_classes(mod, config))

    return sorted(checkers, key=lambda c: (c.priority, c.name))


def get_checker(config: LintConfig, name: str) -> LintChecker:
    """Instantiate a single checker by name, ignoring ``checkers_disabled``.

    Raises:
        KeyError: No checker has that name.

    """
    package = importlib.import_module(__package__ or "lint_runner.checkers")
    for _finder, module_name, _is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name == "base":
            continue
        mod = importlib.import_module(f"{package.__name__}.{module_name}")
        for checker in _find_checker_classes(mod, config, respect_disabled=False):
            if checker.name == name:
                return checker
    raise KeyError(name)


def _find_checker_classes(
    mod: types.ModuleType,
    config: LintConfig,
    *,
    respect_disabled: bool = True,
) -> list[LintChecker]:
    """Instantiate all LintChecker classes defined in the given Python module."""
    found: list[LintChecker] = []

    for attr_name in dir(mod):
        attr = getattr(mod, attr_name)
        if not (
            isinstance(attr, type)
            and attr.__module__ == mod.__name__
            and getattr(attr, "CHECKER_ENABLED", False) is True
        ):
            continue

        try:
            instance = attr(config)
        except (TypeError, ValueError):
            logger.warning("Failed to instantiate checker: %s", attr_name, exc_info=True)
            continue

        if respect_disabled and instance.name in config.checkers_disabled:
            logger.info("Checker disabled by config: %s", instance.name)
            continue

        found.append(instance)
        logger.debug("Loaded checker: %s", instance.name)

    return found
