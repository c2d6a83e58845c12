"""
Logging configuration — central setup for the CLI.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug or DNA_DEBUG  >  --verbose  >  --quiet  >  DNA_LOG_LEVEL  >  WARNING (default)

Optional file output via DNA_LOG_FILE / DNA_LOG_FILE_LEVEL env vars.
"""

from __future__ import annotations

import logging
import os
import sys

# ── Formats ─────────────────────────────────────────────────────

# (max level, format, datefmt): the first row whose level is >= the
# console level wins.  Above INFO, plain messages.
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Loggers kept at WARNING unless we run at DEBUG
_NOISY_LOGGERS = ("urllib3", "asyncio")


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: dict[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags and environment."""
    env = os.environ if environ is None else environ
    if debug or env.get("DNA_DEBUG"):
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env.get("DNA_LOG_LEVEL", "WARNING")


def _console_formatter(level: int) -> logging.Formatter:
    for max_level, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= max_level:
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter(_CONSOLE_DEFAULT)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Install the stderr handler (and optionally a file handler) on the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to WARNING.
        log_file: Also log to this file.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold noisy library loggers at WARNING unless
            the console runs at DEBUG.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(_parse_level(log_file_level) if log_file_level else console_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers[:] = handlers
    # Root passes whatever the most verbose handler accepts
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
