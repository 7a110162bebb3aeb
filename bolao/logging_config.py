"""Logging configuration."""

from __future__ import annotations

import logging
from flask import Flask

_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s"

# Third-party loggers that drown out the poller and request logs at INFO.
_QUIET = ("sqlalchemy.engine", "urllib3")


def configure_logging(app: Flask) -> None:
    """Single-line logs on the root logger, level from ``LOG_LEVEL``.

    The thread name tells poller ticks (``draw-poller``) apart from
    request handling.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=_FORMAT)
    logging.getLogger("bolao").setLevel(level)

    for name in _QUIET:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
