"""Logging setup for the pruxy service.

Records go to stderr and, when ``[logging] path`` is set, to a file as well.
aiohttp logs a line per proxied request and per scrape; those loggers are
held at WARNING unless ``log_network`` is enabled.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

NETWORK_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.server")


def configure_logging(settings: Optional[LoggingConfig] = None) -> None:
    """Replace the root handlers according to ``settings``."""

    settings = settings or LoggingConfig()
    root = logging.getLogger()

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.path:
        settings.path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.path))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(_resolve_level(settings.level))

    network_level = logging.NOTSET if settings.log_network else logging.WARNING
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)

    logging.captureWarnings(True)


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    # getLevelName returns "Level X" for unknown names
    return level if isinstance(level, int) else logging.INFO
