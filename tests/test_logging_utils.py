"""Mini README: Tests for the logging helpers."""

from __future__ import annotations

import logging

import pytest

from finesledger.logging_utils import get_logger, level_for_environment


@pytest.mark.parametrize("environment", ["development", "Dev", " local "])
def test_development_environments_log_debug(environment: str) -> None:
    """Development-style labels switch the root logger to DEBUG."""

    assert level_for_environment(environment) == logging.DEBUG


@pytest.mark.parametrize("environment", ["production", "staging", ""])
def test_other_environments_log_info(environment: str) -> None:
    """Anything that is not a development label stays at INFO."""

    assert level_for_environment(environment) == logging.INFO


def test_get_logger_returns_named_logger() -> None:
    """Module loggers keep the requested name."""

    assert get_logger("finesledger.test").name == "finesledger.test"
