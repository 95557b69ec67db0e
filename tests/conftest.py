import logging

import pytest

from petrel import colors


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    """Log formatting is asserted on plain text."""
    monkeypatch.setattr(colors, "USE_COLOR", False)


@pytest.fixture(autouse=True)
def restore_logger():
    """setup_logging() reconfigures the package logger; undo it per test."""
    logger = logging.getLogger("petrel")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield
    handlers, level, propagate = saved
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
