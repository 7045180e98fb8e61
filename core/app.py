"""
Application coordinator receiving forwarded commands and natural break events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from PySide6.QtCore import QCoreApplication, QObject, QTimer, Signal

from core.commands import Command
from core.duration import INVALID_DURATION
from core.idle_time import IdleTimeProvider
from core.natural_breaks import NaturalBreaksManager
from core.settings import BreakSettings, BreakSettingsManager
from shared.break_message import BreakKind, BreakMessage, BreakRequest
from breaktime.breaktime import logger as app_logger

APP_NAME = "Breaktime"
APP_VERSION = "1.0.0"
SETTINGS_REFRESH_INTERVAL_MS = 15000


@dataclass(eq=False)
class AppCoordinator(QObject):
    """
    Turns commands and idle events into requests for the break scheduler.

    The scheduler itself lives outside this object and subscribes to the
    signals below.
    """

    settings_manager: BreakSettingsManager = field(default_factory=BreakSettingsManager)
    idle_time_provider: Optional[IdleTimeProvider] = None

    pauseRequested = Signal(object)
    resumeRequested = Signal()
    toggleRequested = Signal()
    resetRequested = Signal()
    breakRequested = Signal(object)
    naturalBreakFinished = Signal(object)
    clearBreakScheduler = Signal()

    def __post_init__(self) -> None:
        super().__init__()
        self._logger = app_logger.get_logger()
        self._manual_shutdown_requested = False

        self._settings: BreakSettings = self.settings_manager.read_settings()
        self._natural_breaks = NaturalBreaksManager(
            self._settings,
            idle_time_provider=self.idle_time_provider,
            parent=self,
        )
        self._natural_breaks.naturalBreakStarted.connect(self._on_natural_break_started)
        self._natural_breaks.naturalBreakFinished.connect(self._on_natural_break_finished)
        self._natural_breaks.clearBreakScheduler.connect(self.clearBreakScheduler)

        self._settings_timer = QTimer(self)
        self._settings_timer.setInterval(SETTINGS_REFRESH_INTERVAL_MS)
        self._settings_timer.timeout.connect(self._reload_settings)

    @property
    def settings(self) -> BreakSettings:
        return self._settings

    @property
    def natural_breaks(self) -> NaturalBreaksManager:
        return self._natural_breaks

    @property
    def manual_shutdown_requested(self) -> bool:
        return self._manual_shutdown_requested

    def start(self) -> None:
        self._logger.info("Starting {} v{}.", APP_NAME, APP_VERSION)
        self._settings_timer.start()

    def shutdown(self) -> None:
        self._logger.info("Shutting down application on user request.")
        self._manual_shutdown_requested = True
        self._settings_timer.stop()
        self._natural_breaks.stop()
        self._quit_application()

    def _quit_application(self) -> None:
        app = QCoreApplication.instance()
        if app is not None:
            app.quit()

    def handle_command(self, command: Command) -> bool:
        """
        Execute a command forwarded by another process.

        Returns False when the command was rejected.
        """
        if not command.is_valid:
            self._logger.error("Ignoring unsupported command {}", command.requested)
            return False

        name = command.command
        self._logger.info("Received command {} with options {}", name, command.options)

        if name == "reset":
            self.resetRequested.emit()
        elif name == "resume":
            self.resumeRequested.emit()
        elif name == "toggle":
            self.toggleRequested.emit()
        elif name == "pause":
            return self._pause(command)
        elif name in ("mini", "long"):
            self.breakRequested.emit(self._break_request(command))
        else:
            self._logger.warning("Command {} cannot run in the main instance", name)
            return False
        return True

    def _pause(self, command: Command) -> bool:
        ms = command.duration_to_ms(self._settings)
        if ms == INVALID_DURATION:
            self._logger.error(
                "Error: duration {} is not valid, breaks were not paused",
                command.option("duration"),
            )
            return False
        self.pauseRequested.emit(ms)
        return True

    def _break_request(self, command: Command) -> BreakRequest:
        kind = BreakKind(command.command)
        text = command.option("text") if kind is BreakKind.LONG else None
        message = BreakMessage(title=command.option("title"), text=text)
        if message.is_empty:
            self._logger.debug("No title or text given; next {} break keeps its defaults.", kind.value)
        return BreakRequest(
            kind=kind,
            message=message,
            skip_to_break=not command.option("noskip", False),
        )

    def _reload_settings(self) -> None:
        new_settings = self.settings_manager.read_settings()
        if new_settings != self._settings:
            self._logger.info("Detected registry settings change. Applying updates.")
            self._settings = new_settings
            self._natural_breaks.apply_settings(new_settings)

    def _on_natural_break_started(self) -> None:
        self._logger.info("User went idle; natural break in progress.")

    def _on_natural_break_finished(self, idle_ms) -> None:
        self._logger.info("Natural break finished after {:.1f} minutes.", idle_ms / 60000)
        self.naturalBreakFinished.emit(idle_ms)
