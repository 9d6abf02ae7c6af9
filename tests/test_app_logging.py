"""Tests for logging configuration."""

import logging

from sourcemap_sync.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("sourcemap_sync")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_verbose_enables_debug() -> None:
    logger = logging.getLogger("sourcemap_sync")

    configure_logging(verbose=True)
    assert logger.level == logging.DEBUG

    configure_logging()
    assert logger.level == logging.INFO
