"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this sets the root
level and format once at startup.
"""

import logging
from typing import Optional

from shared.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure the root logger from settings."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)
    logging.getLogger(__name__).debug(
        "Logging configured at %s (%s)", settings.log_level, settings.environment
    )
