"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "wolfi-dev: %(levelname)s: %(message)s"


class _LowerLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        copy = logging.makeLogRecord(record.__dict__)
        copy.levelname = record.levelname.lower()
        return super().format(copy)


def configure_logging(verbose: bool = False) -> None:
    logger = logging.getLogger("wolfi_dev")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_LowerLevelFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
