"""Shared logging helpers for iapsync."""

from __future__ import annotations

import logging
import os

# These log full request URLs at INFO, and subscription URLs embed the subscriber id.
_URL_LOGGERS = ("httpx", "httpcore")


def get_log_level(default: int = logging.INFO) -> int:
    name = os.getenv("IAPSYNC_LOG_LEVEL")
    if not name:
        return default
    level = logging.getLevelNamesMapping().get(name.strip().upper())
    return level if level is not None else default


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    The level defaults to ``IAPSYNC_LOG_LEVEL`` (or INFO). Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level if level is not None else get_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _URL_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
