"""
Entry point for the breaktime executable.
"""

from __future__ import annotations

import ctypes
import sys
import time
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from core.app import APP_VERSION, AppCoordinator
from core.commands import Command, has_command_arguments
from breaktime.breaktime import logger as app_logger

_LOGGER = app_logger.get_logger()
_MUTEX_NAME = "Local\\BreaktimeInstanceMutex"
_ERROR_ALREADY_EXISTS = 183

CommandForwarder = Callable[[Dict[str, Any]], bool]


class _InstanceGuard:
    """Simple named mutex guard to prevent concurrent instances."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._handle = None
        self._kernel32 = ctypes.WinDLL("kernel32", use_last_error=True) if sys.platform == "win32" else None

    def acquire(self) -> bool:
        if self._kernel32 is None:
            return True
        ctypes.set_last_error(0)
        handle = self._kernel32.CreateMutexW(None, False, self._name)
        if not handle:
            return True
        last_error = ctypes.get_last_error()
        if last_error == _ERROR_ALREADY_EXISTS:
            self._kernel32.CloseHandle(handle)
            return False
        self._handle = handle
        return True

    def release(self) -> None:
        if self._kernel32 is None or not self._handle:
            return
        self._kernel32.ReleaseMutex(self._handle)
        self._kernel32.CloseHandle(self._handle)
        self._handle = None


def _run_application_once(argv: Iterable[str], command: Optional[Command] = None) -> Tuple[int, bool]:
    """Start the Qt application once and report whether shutdown was intentional."""
    app = QApplication(list(argv))
    app.setQuitOnLastWindowClosed(False)
    coordinator = AppCoordinator()
    coordinator.start()
    if command is not None:
        QTimer.singleShot(0, lambda: coordinator.handle_command(command))
    exit_code = app.exec()
    manual_shutdown = getattr(coordinator, "manual_shutdown_requested", False)
    return exit_code, bool(manual_shutdown)


def run_runtime(argv: Sequence[str], command: Optional[Command] = None) -> int:
    """Run the break runtime, restarting it after unexpected exits."""
    backoff_seconds = 2
    max_backoff = 30

    while True:
        try:
            exit_code, manual = _run_application_once(argv, command)
        except Exception:  # pragma: no cover - crash guard
            _LOGGER.exception("Breaktime crashed; attempting automatic recovery.")
            exit_code = 1
            manual = False

        if manual:
            return exit_code

        _LOGGER.warning(
            "Breaktime exited unexpectedly (code={}). Restarting in {} seconds.",
            exit_code,
            backoff_seconds,
        )
        # Replay the command line only on the first run.
        command = None
        time.sleep(backoff_seconds)
        backoff_seconds = min(backoff_seconds * 2, max_backoff)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    forwarder: Optional[CommandForwarder] = None,
    guard: Optional[_InstanceGuard] = None,
) -> int:
    """
    Parse the command line and either answer it here, forward it to the
    running instance, or start the runtime.

    ``forwarder`` receives the serialised command and delivers it to the
    running instance; it returns False when delivery failed.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    command: Optional[Command] = None

    if has_command_arguments(args):
        command = Command(args, APP_VERSION)
        if not command.is_valid:
            return 1
        if not command.check_in_main():
            command.run_or_forward()
            return 0

    guard = guard or _InstanceGuard(_MUTEX_NAME)
    if not guard.acquire():
        if command is None:
            _LOGGER.debug("Breaktime instance already running; exiting silently.")
            return 0
        if not command.run_or_forward():
            return 0
        return _forward(command, forwarder)

    try:
        return run_runtime([sys.argv[0], *args], command)
    finally:
        guard.release()


def _forward(command: Command, forwarder: Optional[CommandForwarder]) -> int:
    if forwarder is None:
        _LOGGER.warning("No transport to the running instance; command {} dropped.", command.command)
        return 1
    if not forwarder(command.to_message()):
        _LOGGER.error("Failed to forward command {} to the running instance.", command.command)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
