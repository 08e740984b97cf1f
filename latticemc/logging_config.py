"""Logging setup for the latticemc package logger."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: int = logging.WARNING, log_file: str | None = None) -> logging.Logger:
    """Configure the ``latticemc`` logger with a stderr handler and optional file.

    Existing handlers are replaced so repeated calls do not duplicate output.
    """
    logger = logging.getLogger("latticemc")
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def verbosity_level(verbose: int) -> int:
    """Map a ``-v`` count to a logging level."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING
