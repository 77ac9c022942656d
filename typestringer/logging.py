"""Logging utilities for typestringer runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

_LOGGER_NAME = "typestringer"
_CONSOLE_FORMAT = "[typestringer] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the typestringer hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route typestringer logs to stderr and, when given, to ``log_file``.

    The console only shows warnings unless ``verbose`` is set; the log file
    always records debug messages.
    """
    console_level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.propagate = False

    # Handlers from an earlier invocation in the same process are replaced.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    logger.setLevel(console_level)
    if log_file is not None:
        recorder = logging.FileHandler(log_file, encoding="utf-8")
        recorder.setLevel(logging.DEBUG)
        recorder.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(recorder)
        logger.setLevel(logging.DEBUG)

    return logger


def diagnostic_logger(stream: TextIO | None = None) -> logging.Logger:
    """Return a logger that narrates generator decisions as bare lines on ``stream``.

    The logger is not registered with the logging manager, so each run gets its
    own handler and nothing leaks between runs pointed at different streams.
    ``None`` selects standard error at call time.
    """
    logger = logging.Logger(f"{_LOGGER_NAME}.diagnostics", logging.DEBUG)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "diagnostic_logger", "get_logger"]
