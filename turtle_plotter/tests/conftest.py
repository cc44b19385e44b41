"""Shared fixtures."""

from __future__ import annotations

import logging
import sys

import pytest

from turtle_plotter.utils import logging_config


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo handlers, level, context and excepthook installed by the CLI."""
    root = logging.getLogger()
    level = root.level
    excepthook = sys.excepthook
    yield
    sys.excepthook = excepthook
    for handler in logging_config._installed:
        root.removeHandler(handler)
        handler.close()
    logging_config._installed.clear()
    logging_config.pop_context()
    logging.captureWarnings(False)
    root.setLevel(level)
