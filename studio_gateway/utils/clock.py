"""Time helpers."""
from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float:
        ...


class SystemClock:
    """Monotonic wall-independent clock in milliseconds."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0
