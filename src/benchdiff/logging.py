"""Logging setup for benchdiff.

The console shows INFO (DEBUG with ``--verbose``) on stderr, leaving stdout
to the report itself.  ``--log-file`` adds a DEBUG file handler, which is
where captured cargo, git and harness output ends up in CI.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "benchdiff"

_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _console_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def setup_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the benchdiff logger.

    Calling it again replaces the handlers from the previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_console_handler(verbose))
    if log_file is not None:
        logger.addHandler(_file_handler(log_file))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger ``benchdiff.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
