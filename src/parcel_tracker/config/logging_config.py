from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "parcel_tracker"

# timestamp | level | logger | message
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_CONFIGURED_ATTR = "_parcel_tracker_configured"

_LEVEL_NAMES = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def resolve_level(level: Optional[Union[int, str]] = None, default: Union[int, str] = logging.INFO) -> int:
    """
    First usable value of: `level`, the LOG_LEVEL env var, `default`.
    Names are case-insensitive; unrecognized names are skipped.
    """
    for candidate in (level, os.getenv("LOG_LEVEL"), default):
        if isinstance(candidate, int):
            return candidate
        if isinstance(candidate, str):
            found = _LEVEL_NAMES.get(candidate.strip().upper())
            if found is not None:
                return found
    return logging.INFO


def _console_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            if getattr(h, "stream", None) in (sys.stderr, sys.stdout):
                return h
    return None


def _file_handler(logger: logging.Logger, path: Path) -> Optional[logging.Handler]:
    # FileHandler stores abspath(filename)
    target = os.path.abspath(str(path))
    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == target:
            return h
    return None


def get_logger(
    name: Optional[str] = PACKAGE_LOGGER,
    *,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    propagate: bool = False,
    fmt: str = LOG_FORMAT,
    datefmt: str = LOG_DATEFMT,
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure and return a logger. Repeated calls only add the targets that
    are still missing (console on stderr, rotating file) and re-apply the level
    to the logger and every handler.

    Module loggers such as "parcel_tracker.api.fedex" reach these handlers
    through propagation, so the CLI configures the package logger once.
    """
    logger = logging.getLogger(name)
    resolved = resolve_level(level)
    logger.setLevel(resolved)
    logger.propagate = propagate
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    if console and _console_handler(logger) is None:
        stream = logging.StreamHandler(stream=sys.stderr)
        stream.setFormatter(formatter)
        logger.addHandler(stream)

    if log_file is not None:
        path = Path(log_file).expanduser()
        if _file_handler(logger, path) is None:
            path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
                delay=True,
            )
            rotating.setFormatter(formatter)
            logger.addHandler(rotating)

    for h in logger.handlers:
        h.setLevel(resolved)

    setattr(logger, _CONFIGURED_ATTR, True)
    return logger
