from __future__ import annotations

import logging

from src.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the ``expenses`` logger tree."""

    root = logging.getLogger("expenses")
    root.setLevel((level or settings.log_level).upper())

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
