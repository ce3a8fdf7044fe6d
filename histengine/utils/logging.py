from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: str | int | None, default: int) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), default)


def setup_logger(
    name: str = "histengine",
    console_level: str | int = "INFO",
    log_file: Optional[Path] = None,
    file_level: str | int = "DEBUG",
) -> logging.Logger:
    """
    Configure the package logger once: progress on stdout, full detail in
    `log_file` when given.

    The engine modules only emit DEBUG records (estimator fallbacks, range
    nudges), so with the defaults they reach the log file but not the console.
    """
    logger = logging.getLogger(name)
    console = _resolve_level(console_level, logging.INFO)
    levels = [console]

    if log_file is not None:
        levels.append(_resolve_level(file_level, logging.DEBUG))

    logger.setLevel(min(levels))
    logger.propagate = False

    # repeated calls (tests, several CLI runs in one process) must not stack handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(console)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(levels[1])
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
