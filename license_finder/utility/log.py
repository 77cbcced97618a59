"""
Package-wide logging helpers.

A NullHandler is installed on the package logger so that importing
`license_finder` as a library stays quiet until the application calls
`configure_logging`.
"""

import logging
import sys
from typing import IO, Optional, Union

PACKAGE_LOGGER_NAME = "license_finder"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Returns a logger under the package namespace."""
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: Union[int, str] = logging.WARNING,
    stream: Optional[IO[str]] = None,
    fmt: str = "%(asctime)s %(levelname)s %(name)s: %(message)s",
) -> logging.Logger:
    """
    Attaches a single stderr StreamHandler to the package logger.

    Calling it again re-targets the existing handler instead of stacking a
    new one, so repeated CLI invocations in the same process (tests) keep
    writing to the current stderr.

    Args:
        level: Logging level or level name.
        stream: Target stream, defaults to the current `sys.stderr`.
        fmt: Log record format.

    Returns:
        logging.Logger: The configured package logger.
    """
    logger = get_logger()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(level)

    if stream is None:
        stream = sys.stderr

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            # setStream() would flush the previous stream, which may be closed
            handler.stream = stream
            return logger

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=fmt))
    logger.addHandler(handler)
    return logger
