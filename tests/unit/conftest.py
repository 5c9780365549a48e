"""Shared fixtures for unit tests."""

import logging

import pytest

from httpengine.domain.connection_id import clear_connection_id


@pytest.fixture(autouse=True)
def isolate_engine_logger():
    """Let records reach caplog and undo any configure_logging() side effects."""
    logger = logging.getLogger("httpengine")
    saved = (logger.propagate, logger.level, list(logger.handlers))
    logger.propagate = True
    yield
    for handler in logger.handlers:
        if handler not in saved[2]:
            handler.close()
    logger.propagate = saved[0]
    logger.setLevel(saved[1])
    logger.handlers[:] = saved[2]
    clear_connection_id()
