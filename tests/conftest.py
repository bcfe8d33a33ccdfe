"""Global pytest configuration.

Registers the fixture plugin `tests.algorithms.sample_graphs` when available.
Pytest imports the plugin itself so assertion rewriting applies to it.
"""

from __future__ import annotations

from importlib.util import find_spec

import pytest

from routeform.logging import reset_logging, setup_root_logger

pytest_plugins: list[str] = []
if find_spec("tests.algorithms.sample_graphs") is not None:
    pytest_plugins = ["tests.algorithms.sample_graphs"]


@pytest.fixture(autouse=True)
def _fresh_logging():
    """Give every test a package logger with a single handler."""
    reset_logging()
    setup_root_logger()
    yield
    reset_logging()
