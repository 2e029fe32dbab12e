from __future__ import annotations

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "product_catalog"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_HANDLER_NAME = "product_catalog.stdout"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach one stdout handler to the ``product_catalog`` logger tree and set its level.

    Only the package logger is touched, so uvicorn keeps its own access/error
    logging and the root logger stays free for pytest's capture. Calling it again
    (reloads, several apps in one test run) only updates the level.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(h.get_name() == _HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger under the ``product_catalog`` tree.

    Module names (``__name__``) already live there; anything else, e.g. a short
    component name like ``"startup"``, is nested below the package logger so it
    shares the handler and level set by configure_logging().
    """
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
