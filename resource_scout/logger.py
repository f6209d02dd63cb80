# === FILE: resource_scout/logger.py ===
"""Logging for ResourceScout.

Console records go to stderr: ``resource-scout analyze`` prints its JSON
report on stdout and the two streams must not mix. An optional log file
rotates at 5 MB.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "ResourceScout"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set level and handlers of the ``ResourceScout`` logger and return it."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_LOG_BYTES, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Called once per CLI invocation with the ``--log-*`` options."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


# quiet until the CLI (or a caller) configures it
logger: logging.Logger = init_logging(level="WARNING")

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME"]
