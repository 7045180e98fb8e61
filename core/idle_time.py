"""
System idle time using Win32 GetLastInputInfo.
"""

from __future__ import annotations

import ctypes
import sys
from typing import Callable, Optional

IdleTimeProvider = Callable[[], int]


def is_supported() -> bool:
    return sys.platform == "win32"


def get_idle_time_ms() -> int:
    """Milliseconds since the last keyboard or mouse input."""
    last_input_info = _get_last_input_info()
    tick_count_ms = _get_tick_count_ms()
    # dwTime is a 32-bit tick count and wraps roughly every 49.7 days.
    return (tick_count_ms - last_input_info) & 0xFFFFFFFF


def default_provider() -> Optional[IdleTimeProvider]:
    """
    Return the platform idle time provider, or None when the host offers none.
    """
    if not is_supported():
        return None
    try:
        get_idle_time_ms()
    except OSError:
        return None
    return get_idle_time_ms


def _get_last_input_info() -> int:
    class LASTINPUTINFO(ctypes.Structure):
        _fields_ = [("cbSize", ctypes.c_uint), ("dwTime", ctypes.c_uint)]

    user32 = ctypes.windll.user32  # type: ignore[attr-defined]
    last_input = LASTINPUTINFO()
    last_input.cbSize = ctypes.sizeof(LASTINPUTINFO)

    if not user32.GetLastInputInfo(ctypes.byref(last_input)):
        raise ctypes.WinError()

    return last_input.dwTime


def _get_tick_count_ms() -> int:
    kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
    if hasattr(kernel32, "GetTickCount64"):
        kernel32.GetTickCount64.restype = ctypes.c_ulonglong
        return int(kernel32.GetTickCount64())
    return int(kernel32.GetTickCount())
