from __future__ import annotations

import logging
import os
import sys
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_PACKAGE_LOGGER: Final[str] = "roastlog"


def _resolve_level() -> int:
    level_name = os.getenv("ROASTLOG_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, level_name, logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package logger with a single stream handler.

    The handler writes to the real stderr stream, so library diagnostics never pass
    through an intercepted print.
    """
    global _HANDLER_ATTACHED

    level = _resolve_level()
    package_logger = logging.getLogger(_PACKAGE_LOGGER)

    if not _HANDLER_ATTACHED:
        handler = logging.StreamHandler(sys.__stderr__)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(handler)
        package_logger.propagate = False
        _HANDLER_ATTACHED = True

    package_logger.setLevel(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
