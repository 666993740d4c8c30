"""Logging configuration for pebble.

Modules log through ``logging.getLogger(__name__)``; the host calls
:func:`configure_logging` once at startup.  The level comes from the
``PEBBLE_LOG_LEVEL`` environment variable (default ``INFO``).
"""

import logging
import os
import sys


def configure_logging() -> None:
    """Attach a stderr handler to the ``pebble`` logger.

    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger("pebble")
    if root_logger.handlers:
        return

    level_name = os.environ.get("PEBBLE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(name)s: %(message)s"))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    # The host editor owns the root logger
    root_logger.propagate = False
