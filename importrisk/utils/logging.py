"""Logging helpers shared by the loaders, the pipeline and the CLI."""

from __future__ import annotations

import logging
import sys

from importrisk.config import LOG_LEVEL

_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s - %(message)s"
_PACKAGE = "importrisk"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a stdout logger for *name* at the configured ``LOG_LEVEL``."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    logger.setLevel(_level(LOG_LEVEL))
    return logger


def set_level(level: str) -> None:
    """Change the level of every ``importrisk`` logger created so far."""
    for name in list(logging.root.manager.loggerDict):
        if name == _PACKAGE or name.startswith(_PACKAGE + "."):
            logging.getLogger(name).setLevel(_level(level))
