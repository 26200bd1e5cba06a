"""Sample scheduling on a fixed grid using the clock's alarm, with a failsafe."""

from __future__ import annotations

from .config import (
    ALARM_FAILSAFE_SEC,
    ALARM_MAX_AHEAD_SEC,
    ENABLE_ALARM_FAILSAFE,
    UPDATE_INTERVAL_SEC,
)
from .hardware import SqwMode, SimulatedRtc


def _next_on_grid(epoch: int) -> int:
    return epoch - (epoch % UPDATE_INTERVAL_SEC) + UPDATE_INTERVAL_SEC


class AlarmScheduler:
    """Keeps the next sample time on the interval grid; inert without a clock."""

    def __init__(self, rtc: SimulatedRtc | None) -> None:
        self._rtc = rtc
        self._next = 0
        self._base = 0
        self._last_fire = 0

    def _program_alarm(self, epoch: int) -> None:
        if self._rtc is None:
            return
        self._rtc.write_sqw_pin_mode(SqwMode.OFF)
        self._rtc.clear_alarm(1)
        self._rtc.clear_alarm(2)
        self._rtc.set_alarm1(epoch)

    def start(self, start_epoch: int) -> None:
        """Schedule the first grid point after start_epoch and anchor elapsed time."""
        if self._rtc is None:
            return
        self._next = _next_on_grid(start_epoch)
        self._base = self._next
        self._program_alarm(self._next)
        self._last_fire = start_epoch

    def should_fire(self, now_epoch: int) -> bool:
        if self._rtc is None or self._next == 0:
            return False
        return self._rtc.alarm_fired(1) or now_epoch >= self._next

    def advance_after_fire(self, now_epoch: int) -> None:
        """Move the target strictly past now_epoch on the grid and reprogram."""
        if self._rtc is None or self._next == 0:
            return
        self._rtc.clear_alarm(1)
        while self._next <= now_epoch:
            self._next += UPDATE_INTERVAL_SEC
        self._program_alarm(self._next)

    def mark_sample(self, now_epoch: int) -> None:
        if ENABLE_ALARM_FAILSAFE:
            self._last_fire = now_epoch

    def sanity(self, now_epoch: int) -> None:
        """Realign when the target lies further ahead than allowed."""
        if self._rtc is None or self._next == 0:
            return
        if self._next < now_epoch:
            return
        if self._next - now_epoch > ALARM_MAX_AHEAD_SEC:
            self._next = _next_on_grid(now_epoch)
            self._base = self._next
            self._program_alarm(self._next)

    def failsafe_check(self, now_epoch: int) -> bool:
        """Reschedule after too long a silence; True if it did."""
        if not ENABLE_ALARM_FAILSAFE or self._rtc is None or self._next == 0:
            return False
        if ((now_epoch - self._last_fire) & 0xFFFFFFFF) > ALARM_FAILSAFE_SEC:
            self._next = _next_on_grid(now_epoch)
            self._program_alarm(self._next)
            self._last_fire = now_epoch
            return True
        return False

    def next_epoch(self) -> int:
        return self._next

    def base_epoch(self) -> int:
        return self._base