"""Logging setup shared by the dashboard and scripts.

The engine modules only ever call ``logging.getLogger(__name__)``; the
process entry point decides where records go by calling
:func:`setup_logging` once.
"""

from __future__ import annotations

import logging
import sys

_LOG_FMT = '%(asctime)s level=%(levelname)s name=%(name)s msg="%(message)s"'


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FMT))
    root.addHandler(handler)
