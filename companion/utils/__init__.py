# companion/utils/__init__.py
# -*- coding: utf-8 -*-
"""
Companion Server — Utility toolbox
----------------------------------
Shared helper functions used across the server:

- file_io   : atomic JSON document read/write
- logging   : central logging configuration
- timers    : stopwatch for provider latency

Import from here, e.g.:

    from companion.utils import setup_logging, write_json_atomic
"""

from __future__ import annotations

from .file_io import (  # noqa: F401
    read_json_document,
    write_json_atomic,
)

from .logging import (  # noqa: F401
    setup_logging,
    get_logger,
)

from .timers import (  # noqa: F401
    Stopwatch,
)
