"""
Logging setup for the Scribe backend.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler once at startup.
"""

import logging

from .config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    # httpx logs every request at INFO, which includes full URLs
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
