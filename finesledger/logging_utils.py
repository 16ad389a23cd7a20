"""Mini README: Application-wide logging helpers for the fines ledger.

Structure:
    * level_for_environment - map the configured environment to a log level.
    * configure_root_logger - one-time root handler set-up.
    * get_logger - factory returning module loggers with baseline config.

Usage:
    Modules import ``get_logger``. The first call configures the root logger
    at DEBUG for the ``development`` environment (cache refreshes, vote
    stripping and batch sizes become visible) and INFO everywhere else, as
    read from ``FINESLEDGER_ENVIRONMENT``.
"""

from __future__ import annotations

import logging
from typing import Optional

from .configuration import get_settings

_LOGGER_INITIALISED = False

VERBOSE_ENVIRONMENTS = {"development", "dev", "local"}


def level_for_environment(environment: str) -> int:
    """DEBUG for development deployments, INFO for the rest."""

    if environment.strip().lower() in VERBOSE_ENVIRONMENTS:
        return logging.DEBUG
    return logging.INFO


def configure_root_logger(level: Optional[int] = None) -> None:
    """Attach the ledger's formatter to the root logger exactly once.

    Without an explicit ``level`` the configured environment decides it.
    """

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return

    if level is None:
        level = level_for_environment(get_settings().environment)

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True
    logging.getLogger(__name__).debug("Root logger configured at %s", logging.getLevelName(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
