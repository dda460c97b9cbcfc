"""Logging helpers for command-line builds."""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "asset_catalog.build"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_build_logger(*, verbose: bool = False, log_file: str | None = None) -> logging.Logger:
    """
    Configure the build logger.

    Progress goes to stderr at INFO when verbose (warnings and errors only
    otherwise). When `log_file` is given, a full DEBUG log is also written
    there as UTF-8.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file:
        directory = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.debug("Build logging initialized (verbose=%s)", verbose)
    if log_file:
        logger.debug("Build log file: %s", log_file)
    return logger
