"""Logging setup. Library modules only call get_logger(); the CLI configures output."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(filename)-15s %(message)s"
LOG_DATEFMT = "%Y-%m-%d,%H:%M:%S"

_ROOT_NAME = "fanplot"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the package logger (never the root logger)."""
    logger = logging.getLogger(_ROOT_NAME)
    logger.setLevel(level)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)
    return logger
