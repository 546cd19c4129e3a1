"""Shared test fixtures."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_runner_logger():
    """Drop handlers a LintRunner attached so they don't outlive the test's streams."""
    yield
    logger = logging.getLogger("lint_runner")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
