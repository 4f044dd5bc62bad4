# log.py
from __future__ import annotations

import logging
import os
import sys


FORMATTER = logging.Formatter("[%(levelname)s:%(asctime)s][%(filename)s:%(lineno)s]%(message)s")

LEVEL_ENV = "VBANWIRE_LOG_LEVEL"

_ROOT_NAME = "vbanwire"


def _level_from_env(default: int) -> int:
    raw = (os.environ.get(LEVEL_ENV) or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def get_logger(name: str) -> logging.Logger:
    """Returns a child of the application logger, e.g. ``vbanwire.sources``."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def configure(verbosity: int = 0) -> logging.Logger:
    """
    Attach a single stderr handler to the application logger.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG. VBANWIRE_LOG_LEVEL overrides the
    default when no -v flag is given.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = _level_from_env(logging.WARNING)

    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(level)
    root.propagate = False

    if not getattr(root, "_vbanwire_configured", False):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(FORMATTER)
        root.addHandler(handler)
        root._vbanwire_configured = True  # type: ignore[attr-defined]

    for h in root.handlers:
        h.setLevel(level)
    return root
