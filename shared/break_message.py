"""
Data exchanged between the break runtime and the break presentation layer.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class BreakKind(Enum):
    MINI = "mini"
    LONG = "long"


@dataclass(frozen=True, slots=True)
class BreakMessage:
    """Title and body text shown on a break overlay."""

    title: Optional[str] = None
    text: Optional[str] = None

    def as_pair(self) -> List[Optional[str]]:
        return [self.title, self.text]

    @property
    def is_empty(self) -> bool:
        return not self.title and not self.text


@dataclass(frozen=True, slots=True)
class BreakProgress:
    """
    Countdown parameters for a running break.

    ``started_at`` is a wall-clock timestamp in milliseconds and
    ``duration_ms`` the planned length of the break.
    """

    started_at: int
    duration_ms: int

    def remaining_ms(self, now: Optional[int] = None) -> int:
        current = _now_ms() if now is None else now
        return max(0, self.started_at + self.duration_ms - current)

    def fraction_elapsed(self, now: Optional[int] = None) -> float:
        if self.duration_ms <= 0:
            return 1.0
        remaining = self.remaining_ms(now)
        return 1.0 - remaining / self.duration_ms

    def format_remaining(self, now: Optional[int] = None) -> str:
        seconds = -(-self.remaining_ms(now) // 1000)
        minutes, seconds = divmod(seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"


@dataclass(frozen=True, slots=True)
class BreakRequest:
    """A forwarded ``mini``/``long`` command for the break scheduler."""

    kind: BreakKind
    message: BreakMessage
    skip_to_break: bool = True


def _now_ms() -> int:
    return int(time.time() * 1000)
