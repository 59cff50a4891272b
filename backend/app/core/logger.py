"""
Shared application logger
"""
import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = settings.LOG_LEVEL) -> None:
    """Configure the root handler once; safe to call repeatedly."""
    root = logging.getLogger()
    if not any(getattr(h, "_lawdesk", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._lawdesk = True
        root.addHandler(handler)
    root.setLevel(level.upper())


logger = logging.getLogger("lawdesk")
