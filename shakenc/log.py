"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.WARNING, stream=None) -> logging.Logger:
    """Attach a single stderr handler to the ``shakenc`` logger.

    Calling it again replaces the handler instead of stacking a second one.
    """

    logger = logging.getLogger("shakenc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
