"""Logging helpers."""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: Union[int, str] = logging.WARNING, fmt: Optional[str] = None) -> None:
    """
    Configure root logging once per process.

    Args:
        level: Logging level name or number (e.g. "DEBUG", logging.INFO)
        fmt: Optional log format; defaults to LOG_FORMAT
    """
    global _configured
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    if _configured:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(level=level, format=fmt or LOG_FORMAT)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
