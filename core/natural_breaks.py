"""
Natural break detection driven by system idle time.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from breaktime.breaktime import logger as app_logger
from core import idle_time
from core.idle_time import IdleTimeProvider

_LOGGER = app_logger.get_logger()

ONSET_THRESHOLD_MS = 20000
SAMPLE_INTERVAL_MS = 1000


class NaturalBreakState(Enum):
    IDLE_NOT_BREAKING = "Idle-Not-Breaking"
    ON_NATURAL_BREAK = "On-Natural-Break"


class NaturalBreaksManager(QObject):
    """
    Samples idle time every second and reports natural breaks.

    A natural break starts once the user has been idle for longer than
    ``ONSET_THRESHOLD_MS``. It ends when input resumes; it is only reported
    as finished when the idle time seen on the previous sample exceeded the
    configured break duration. While the break lasts longer than the break
    duration, ``clearBreakScheduler`` is emitted on every sample.
    """

    naturalBreakStarted = Signal()
    naturalBreakFinished = Signal(object)
    clearBreakScheduler = Signal()
    resetIdleTime = Signal()

    def __init__(
        self,
        settings,
        idle_time_provider: Optional[IdleTimeProvider] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings
        self._idle_time_provider = idle_time_provider or idle_time.default_provider()
        self._timer = QTimer(self)
        self._timer.setInterval(SAMPLE_INTERVAL_MS)
        self._timer.timeout.connect(self._check_idle_time)  # type: ignore[arg-type]

        self.using_natural_breaks = bool(settings.get("naturalBreaks"))
        self.is_on_natural_break = False
        self.last_idle_time = 0

        self.resetIdleTime.connect(self._on_reset_idle_time)  # type: ignore[arg-type]

        if self.using_natural_breaks:
            self.start()

    @property
    def state(self) -> NaturalBreakState:
        if self.is_on_natural_break:
            return NaturalBreakState.ON_NATURAL_BREAK
        return NaturalBreakState.IDLE_NOT_BREAKING

    @property
    def is_sampling(self) -> bool:
        return self._timer.isActive()

    @property
    def idle_time(self) -> int:
        if not self.using_natural_breaks or self._idle_time_provider is None:
            return 0
        return self._idle_time_provider()

    def set_idle_time_provider(self, provider: Optional[IdleTimeProvider]) -> None:
        """
        Override idle time acquisition. Primarily used for testing.
        """
        self._idle_time_provider = provider

    def start(self) -> None:
        """Begin sampling idle time."""
        if self._idle_time_provider is None:
            _LOGGER.warning("Idle time is not available on this system; natural breaks disabled.")
            self.using_natural_breaks = False
            return
        if self._timer.isActive():
            return
        self.using_natural_breaks = True
        self.last_idle_time = 0
        self._timer.start()

    def stop(self) -> None:
        """Stop sampling and forget any natural break in progress."""
        self.using_natural_breaks = False
        self.is_on_natural_break = False
        self._timer.stop()

    def reset(self) -> None:
        self.stop()
        self.start()

    def apply_settings(self, settings) -> None:
        """Follow a runtime change of the ``naturalBreaks`` setting."""
        self.settings = settings
        enabled = bool(settings.get("naturalBreaks"))
        if enabled and not self._timer.isActive():
            _LOGGER.info("Natural breaks enabled.")
            self.start()
        elif not enabled and self._timer.isActive():
            _LOGGER.info("Natural breaks disabled.")
            self.stop()

    def _on_reset_idle_time(self) -> None:
        _LOGGER.debug("Idle time reset requested.")
        self.reset()

    def _check_idle_time(self) -> None:
        try:
            current = self.idle_time
        except OSError as exc:
            # Stop for the rest of the session rather than failing every second.
            _LOGGER.warning("Querying idle time failed ({}); natural breaks disabled.", exc)
            self._idle_time_provider = None
            self.stop()
            return

        break_duration = self.settings.get("breakDuration")

        if not self.is_on_natural_break and current > ONSET_THRESHOLD_MS:
            self.is_on_natural_break = True
            _LOGGER.info("Natural break started.")
            self.naturalBreakStarted.emit()

        if self.is_on_natural_break and current < ONSET_THRESHOLD_MS:
            self.is_on_natural_break = False
            _LOGGER.info("Natural break ended after {} ms idle.", self.last_idle_time)
            if self.last_idle_time > break_duration:
                self.naturalBreakFinished.emit(self.last_idle_time)

        if self.is_on_natural_break and current > break_duration:
            self.clearBreakScheduler.emit()

        _LOGGER.trace("Idle {} ms, on natural break: {}", current, self.is_on_natural_break)
        self.last_idle_time = current
