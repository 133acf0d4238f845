# companion/utils/logging.py
# -*- coding: utf-8 -*-
"""
Companion Server — logging utilities
------------------------------------
Central logging configuration for the companion server.

We try to:
- Use a consistent format across all modules.
- Honour settings.debug (more verbose in dev).
- Keep uvicorn / HTTP client chatter out of the way.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("uvicorn.access", "urllib3", "httpx")


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
) -> None:
    """
    Configure root logging for the process.

    Parameters
    ----------
    debug:
        If True, default log level becomes DEBUG, otherwise INFO.
        Wired from settings.debug in main.py.
    level:
        Optional explicit logging level that overrides the debug flag.

    Calling this more than once only adjusts levels.
    """
    base_level = level if level is not None else (logging.DEBUG if debug else logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(base_level)
        for h in root.handlers:
            h.setLevel(base_level)
        return

    logging.basicConfig(level=base_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    noisy_level = os.getenv("COMPANION_NOISY_LOG_LEVEL", "WARNING")
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(noisy_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
