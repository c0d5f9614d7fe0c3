"""
Logging configuration — one-time setup for the CLI.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
what is configured here.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  TIMELEDGER_LOG_LEVEL  >  WARNING

A log file can be added with TIMELEDGER_LOG_FILE; its level comes from
TIMELEDGER_LOG_FILE_LEVEL and defaults to the console level.  The file
always gets the detailed format.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "TIMELEDGER_LOG_LEVEL"
LOG_FILE_ENV = "TIMELEDGER_LOG_FILE"
LOG_FILE_LEVEL_ENV = "TIMELEDGER_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

# (threshold, format, datefmt): first threshold >= level wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = ("%(levelname)s: %(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a console handler and,
    optionally, a file handler.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Log file path. Defaults to ``TIMELEDGER_LOG_FILE``.
        log_file_level: File handler level. Defaults to
            ``TIMELEDGER_LOG_FILE_LEVEL``, then to ``level``.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    log_file = log_file or os.environ.get(LOG_FILE_ENV)
    if log_file:
        file_level = _parse_level(log_file_level or os.environ.get(LOG_FILE_LEVEL_ENV) or level)
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # Root passes everything any handler wants; handlers do the filtering
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_DEFAULT
    for threshold, candidate_fmt, candidate_datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            fmt, datefmt = candidate_fmt, candidate_datefmt
            break

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric constant; WARNING if unknown."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
