"""Tests for singleton logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from constforge.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    set_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> Iterator[None]:
    """Reset the singleton flag and root level around each test."""
    import constforge.logging_config as mod

    root = logging.getLogger()
    level = root.level
    mod._configured = False
    yield
    root.setLevel(level)


def test_setup_logging_is_idempotent() -> None:
    with patch("constforge.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()
        mock_bc.assert_called_once()


def test_second_call_adjusts_level() -> None:
    with patch("constforge.logging_config.logging.basicConfig"):
        setup_logging()
        setup_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG


def test_basic_config_arguments() -> None:
    with patch("constforge.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("info")
    mock_bc.assert_called_once_with(
        level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )


def test_suppressed_loggers_at_warning() -> None:
    setup_logging()
    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        assert lg.level == logging.WARNING, (
            f"Logger {name!r} level is {lg.level}, expected WARNING"
        )


def test_set_level() -> None:
    set_level("ERROR")
    assert logging.getLogger().level == logging.ERROR
