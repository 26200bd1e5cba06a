"""Display backlight with automatic switch-off."""

from __future__ import annotations

from collections.abc import Callable

from .config import BACKLIGHT_DURATION_SEC, BACKLIGHT_PIN, HIGH, LOW
from .hardware import SimulatedBoard


def _signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


class Backlight:
    """Drives the backlight pin and turns it off after a fixed duration."""

    def __init__(self, board: SimulatedBoard, clock: Callable[[], int]) -> None:
        self._board = board
        self._clock = clock
        self._active = False
        self._start = 0
        board.digital_write(BACKLIGHT_PIN, LOW)

    def on(self) -> None:
        self._board.digital_write(BACKLIGHT_PIN, HIGH)
        self._active = True
        self._start = self._clock()

    def off(self) -> None:
        self._board.digital_write(BACKLIGHT_PIN, LOW)
        self._active = False

    def maintain(self, now_seconds: int) -> None:
        if not self._active:
            return
        if _signed32(now_seconds - self._start) >= BACKLIGHT_DURATION_SEC:
            self.off()

    def is_active(self) -> bool:
        return self._active

    def start_seconds(self) -> int:
        return self._start