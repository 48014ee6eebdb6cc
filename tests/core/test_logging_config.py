"""Tests for deterministic logging setup."""

import logging

from relnotes.core.logging_config import LOG_FORMAT, get_logger, setup_logging


def test_setup_logging_is_idempotent() -> None:
    logger = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)

    assert logger.name == "relnotes"
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate


def test_handler_uses_deterministic_format() -> None:
    logger = setup_logging()
    formatter = logger.handlers[0].formatter

    assert formatter is not None
    assert formatter._fmt == LOG_FORMAT


def test_get_logger_namespaced() -> None:
    assert get_logger("parser").name == "relnotes.parser"
