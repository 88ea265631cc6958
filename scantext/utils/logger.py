"""Centralized logging setup for scantext.

Every module logs through ``get_logger(__name__)``; the process entry
point (API server or CLI) calls ``setup_logging`` once.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG/INFO.
_NOISY_LOGGERS = ("PIL", "multipart", "python_multipart")


def setup_logging(level: str = "INFO") -> None:
    """Install a stdout handler on the root logger.

    Calling it again is a no-op once a handler is present. Unknown level
    names fall back to INFO.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger, typically for ``__name__`` of the caller."""
    return logging.getLogger(name)
