"""
Logging setup for the breaktime runtime and command line.

Console output is what a user of the command line sees, so its level can be
chosen with ``BREAKTIME_CONSOLE_LEVEL`` (default ``INFO``). The log file
always records debug detail.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger as _logger

_LOG_INITIALISED = False
_CONSOLE_HANDLER_ID: Optional[int] = None
LOG_DIR = Path(
    os.environ.get(
        "BREAKTIME_LOG_DIR",
        str(Path.home() / "AppData" / "Local" / "Breaktime"),
    )
)
DEFAULT_LOG_PATH = LOG_DIR / "breaktime.log"
DEFAULT_CONSOLE_LEVEL = "INFO"
CONSOLE_FORMAT = "<level>{level}</level>: {message}"


def console_level() -> str:
    """Console level requested through the environment, if loguru knows it."""
    requested = os.environ.get("BREAKTIME_CONSOLE_LEVEL", DEFAULT_CONSOLE_LEVEL).strip().upper()
    try:
        _logger.level(requested)
    except ValueError:
        return DEFAULT_CONSOLE_LEVEL
    return requested


def configure(log_path: Optional[Path] = None, level: Optional[str] = None) -> None:
    """
    Configure loguru for the application.

    Runs only once per process: a terse console sink on stderr plus a
    rotating file sink with debug detail.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or DEFAULT_LOG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    if sys.stderr is not None:
        _add_console(sys.stderr, level or console_level())
    _logger.add(
        target,
        level="DEBUG",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    _LOG_INITIALISED = True


def set_console_level(level: str, sink: Optional[TextIO] = None) -> int:
    """
    Replace the console sink with one filtering at ``level``.

    Returns the loguru handler id of the new sink.
    """
    global _CONSOLE_HANDLER_ID
    configure()
    if _CONSOLE_HANDLER_ID is not None:
        _logger.remove(_CONSOLE_HANDLER_ID)
        _CONSOLE_HANDLER_ID = None
    return _add_console(sink or sys.stderr, level)


def _add_console(sink: TextIO, level: str) -> int:
    global _CONSOLE_HANDLER_ID
    _CONSOLE_HANDLER_ID = _logger.add(sink, level=level.upper(), format=CONSOLE_FORMAT, colorize=False)
    return _CONSOLE_HANDLER_ID


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger
