"""
Logging configuration — one setup call per process.

The CLI group callback and the web server call ``setup_logging()``
once; every module just does ``logger = logging.getLogger(__name__)``.

Level precedence:
    --debug / --verbose / --quiet  >  TS_LOG_LEVEL  >  WARNING

File output is opt-in via TS_LOG_FILE, with its own level from
TS_LOG_FILE_LEVEL (defaults to the console level).
"""

from __future__ import annotations

import logging
import os
import sys

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: plain message, composition output stays readable
_FMT_MINIMAL = "%(message)s"

# INFO: timestamp + logger name
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG and file output: level, logger and line
_FMT_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_SHORT = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_PACKAGE_LOGGER = "templatestudio"

# Loggers kept at WARNING unless we're debugging
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def level_from_flags(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Pick the console level from CLI flags, then TS_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("TS_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file path (default: TS_LOG_FILE).
        log_file_level: Optional file level (default: TS_LOG_FILE_LEVEL,
            then the console level).
    """
    console_level = _parse_level(level)
    log_file = log_file or os.environ.get("TS_LOG_FILE")
    log_file_level = log_file_level or os.environ.get("TS_LOG_FILE_LEVEL")

    if console_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DETAIL, _DATEFMT_SHORT
    elif console_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_SHORT
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        effective = min(effective, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective)
    logging.getLogger(_PACKAGE_LOGGER).setLevel(effective)

    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: str | None) -> int:
    """Level name → numeric constant; unknown names fall back to WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
