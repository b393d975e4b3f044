"""Tests for the application logger."""

import logging
import logging.handlers

from plansync_cli.utils.logger import get_logger


def test_logger_is_singleton():
    assert get_logger() is get_logger()


def test_named_loggers_are_children():
    logger = get_logger("sync")

    assert logger.name == "plansync_cli.sync"
    assert logger.parent is get_logger()


def test_has_rotating_file_handler():
    logger = get_logger()

    handlers = [
        h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert handlers
    assert not logger.propagate
    assert logger.level == logging.DEBUG
