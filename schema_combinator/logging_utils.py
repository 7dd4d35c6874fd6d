"""Logging setup for the schema_combinator command line."""

from __future__ import annotations

import logging

_LOGGER_NAME = "schema_combinator"


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """
    Configure the package logger with a single console handler.

    Args:
        verbose: Log debug records (extraction, combination, writes)

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated invocations do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[schema_combinator] %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(stream_handler)

    return logger


__all__ = ["configure_logging"]
