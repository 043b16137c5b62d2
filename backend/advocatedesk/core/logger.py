"""
Shared application logger.
"""
import logging
import sys

from advocatedesk.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure() -> logging.Logger:
    root = logging.getLogger("advocatedesk")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    return root


logger = _configure()
