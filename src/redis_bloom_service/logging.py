"""Logging configuration for the command line tool."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class _BloomFilterHandler(logging.StreamHandler):
    """Marks the handler installed by ``configure_logging``."""


def configure_logging(log_level: str = "WARNING") -> None:
    """Attach a stream handler to the root logger.

    Only adds a handler, does not remove existing ones. Calling it again only
    updates the level.

    Args:
        log_level: Logging level name (default: WARNING).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    if any(isinstance(h, _BloomFilterHandler) for h in root_logger.handlers):
        return

    handler = _BloomFilterHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
