"""
Application logger.
"""

import logging
import sys

from portal.core.config import get_settings

LOGGER_NAME = "portal"


def _configure() -> logging.Logger:
    settings = get_settings()
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        log.addHandler(handler)
    log.setLevel(settings.LOG_LEVEL.upper())
    return log


logger = _configure()
