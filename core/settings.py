"""
Registry-backed configuration for the breaktime runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from breaktime.breaktime import logger as app_logger

try:
    import winreg
except ModuleNotFoundError:  # pragma: no cover - non-Windows environments
    winreg = None

_LOGGER = app_logger.get_logger()

_BASE_SUBKEY = r"Software\Breaktime"
_MIN_BREAK_DURATION_SECONDS = 10
_MAX_BREAK_DURATION_SECONDS = 4 * 60 * 60
DEFAULT_BREAK_DURATION_MS = 5 * 60 * 1000
DEFAULT_MORNING_HOUR = 6


@dataclass(eq=True)
class BreakSettings:
    natural_breaks: bool = True
    break_duration_ms: int = DEFAULT_BREAK_DURATION_MS
    morning_hour: int = DEFAULT_MORNING_HOUR

    _KEYS = {
        "naturalBreaks": "natural_breaks",
        "breakDuration": "break_duration_ms",
        "morningHour": "morning_hour",
    }

    def get(self, key: str) -> Any:
        """Look up a setting by its camelCase key."""
        try:
            return getattr(self, self._KEYS[key])
        except KeyError:
            raise KeyError(f"Unknown setting {key!r}") from None


class BreakSettingsManager:
    """Loads settings from HKCU and clamps invalid data."""

    def __init__(self, *, hive: Optional[int] = None, winreg_module=winreg) -> None:
        self._winreg = winreg_module
        if hive is None and winreg_module is not None:
            hive = winreg_module.HKEY_CURRENT_USER
        self.hive = hive

    def read_settings(self) -> BreakSettings:
        if self._winreg is None:
            return BreakSettings()

        key = self._open_key()
        if key is None:
            return BreakSettings()

        try:
            return BreakSettings(
                natural_breaks=self._read_bool(key, "NaturalBreaks", True),
                break_duration_ms=self._read_break_duration(key),
                morning_hour=self._read_morning_hour(key),
            )
        finally:
            self._winreg.CloseKey(key)

    def _open_key(self):
        try:
            return self._winreg.OpenKey(self.hive, _BASE_SUBKEY, 0, self._winreg.KEY_READ)
        except FileNotFoundError:
            return None
        except OSError as exc:
            _LOGGER.warning("Unable to open settings key {}: {}", _BASE_SUBKEY, exc)
            return None

    def _read_bool(self, key, name: str, default: bool) -> bool:
        raw = self._read_dword(key, name)
        if raw is None:
            return default
        return bool(raw)

    def _read_break_duration(self, key) -> int:
        raw = self._read_dword(key, "BreakDurationSeconds")
        if raw is None:
            return DEFAULT_BREAK_DURATION_MS
        if raw < _MIN_BREAK_DURATION_SECONDS or raw > _MAX_BREAK_DURATION_SECONDS:
            _LOGGER.warning(
                "Invalid break duration {} found in registry. Clamping to safe bounds.",
                raw,
            )
        seconds = max(_MIN_BREAK_DURATION_SECONDS, min(_MAX_BREAK_DURATION_SECONDS, raw))
        return seconds * 1000

    def _read_morning_hour(self, key) -> int:
        raw = self._read_dword(key, "MorningHour")
        if raw is None:
            return DEFAULT_MORNING_HOUR
        if raw > 23:
            _LOGGER.warning("Invalid morning hour {} found in registry. Using {}.", raw, DEFAULT_MORNING_HOUR)
            return DEFAULT_MORNING_HOUR
        return raw

    def _read_dword(self, key, name: str) -> Optional[int]:
        try:
            value, value_type = self._winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        if value_type != self._winreg.REG_DWORD:
            _LOGGER.warning("Registry value {} has unexpected type {}.", name, value_type)
            return None
        return int(value)
