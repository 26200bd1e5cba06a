"""Runtime state shared between the main loop, interrupt handlers and modes."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from .hardware import SimulatedRtc


class DeviceMode(enum.IntEnum):
    """Operating mode chosen by the slide switch."""

    CLOCK = 0
    HYGRO = 1


@dataclass
class AppState:
    """Mutable device state: mode, counters, wake flags and debounce bookkeeping."""

    # Clock and mode
    rtc_available: bool = False
    current_mode: DeviceMode = DeviceMode.HYGRO
    start_time_rtc: datetime | None = None
    mode_start_rtc: datetime | None = None

    # Millisecond-based fallbacks and counters
    start_millis: int = 0
    mode_start_millis: int = 0
    last_hygro_update_millis: int = 0
    mode_sleep_seconds_accum: int = 0
    soft_seconds: int = 0  # clock mode without a real-time clock
    sys_seconds: int = 0  # coarse seconds for the backlight without a clock

    # Pin-change wake flags
    switch_wake: bool = False
    tick_wake: bool = False
    serial_wake: bool = False
    last_pins_d: int = 0

    # Backlight button
    bl_button_wake: bool = False
    last_pins_b: int = 0

    # Backlight and serial keep-awake bookkeeping
    bl_last_handled_ms: int = 0
    serial_awake_until: int = 0

    # Mode switch debounce
    last_mode_read_ms: int = 0
    last_mode_enter_ms: int = 0
    last_stable_mode: DeviceMode = DeviceMode.HYGRO

    def current_seconds(self, rtc: SimulatedRtc | None) -> int:
        """Seconds from the clock when present, else the coarse system counter."""
        if not self.rtc_available:
            return self.sys_seconds
        if rtc is None:
            raise ValueError("clock marked available but none given")
        return int(rtc.now().timestamp())

    def clear_wake_flags(self) -> None:
        """Clear the switch, tick and serial wake flags."""
        self.switch_wake = False
        self.tick_wake = False
        self.serial_wake = False