"""
Logging Facility
================

Every record of the driver goes through the standard ``logging`` package
to a single stream (standard output by default). The handler holds its own
lock while emitting, so concurrent workers never interleave within a line,
and the stream is flushed after each record.
"""

import logging
import sys
from typing import IO, Optional, Union

from .config import LOG_FORMAT

PACKAGE_LOGGER = "graph_bench_driver"

_handler: Optional[logging.Handler] = None


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Route the driver's log records to a single serialized sink.

    Calling this again replaces the previous handler. Records do not
    propagate to the root logger, so they are written exactly once.

    Parameters
    ----------
    level : int or str, optional
        Minimum level to emit (default: INFO)
    stream : file-like, optional
        Destination of the records (default: sys.stdout)

    Returns
    -------
    logging.Logger
        The package logger
    """
    global _handler

    root = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)
    root.setLevel(level)
    root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or one of its children."""
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
