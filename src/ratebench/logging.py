"""Logging for ratebench.

Library modules log through ``logging.getLogger("ratebench")``.  The
runner's per-batch progress ("error / s.d." lines and the final "time ran
for" line) is logged at :data:`PROGRESS_LEVEL` when a run's settings are
verbose and at DEBUG otherwise, see :func:`progress_level`.

The CLI configures the logger once per command with :func:`setup_logging`.
Library callers who ask for ``verbose=True`` without configuring logging
get a bare console handler from :func:`ensure_progress_output`, so the
diagnostics still reach the terminal.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "ratebench"
PROGRESS_LEVEL = logging.INFO

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"
_PROGRESS_FORMAT = "%(message)s"


def progress_level(verbose: bool) -> int:
    """Level for per-batch progress records of a run."""
    return PROGRESS_LEVEL if verbose else logging.DEBUG


def _console_handler(level: int, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the ratebench logger for a CLI command.

    The console shows progress-level records by default, everything with
    *verbose* and only warnings with *quiet* (*verbose* wins).  A
    *log_file* always receives DEBUG records, so it keeps the per-batch
    history of non-verbose runs too.

    Handlers from a previous call are closed and replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = PROGRESS_LEVEL
    logger.addHandler(_console_handler(console_level, _CONSOLE_FORMAT))

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def ensure_progress_output() -> logging.Handler | None:
    """Make verbose progress visible when nothing handles ratebench logs.

    Attaches a plain console handler at :data:`PROGRESS_LEVEL` if the
    ratebench logger has no handlers of its own, and lowers the logger's
    level to match when needed.  A logger already configured by the CLI
    or by the application is left alone.

    Returns:
        The attached handler, or None if the logger was already configured.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return None
    handler = _console_handler(PROGRESS_LEVEL, _PROGRESS_FORMAT)
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > PROGRESS_LEVEL:
        logger.setLevel(PROGRESS_LEVEL)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Child logger ``ratebench.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
