"""
Logging helpers.

All modules log through ``logging.getLogger(__name__)``; this module only
installs a single stream handler on the package logger so CLI and demo
entry points get readable output without touching the root logger.
"""

from __future__ import annotations

import logging
from typing import Union

PACKAGE_LOGGER = "batchinvoker"
_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: Union[str, int] = "INFO") -> logging.Logger:
    """
    Attach one stream handler to the package logger (idempotent).
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(h, "_batchinvoker", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._batchinvoker = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
