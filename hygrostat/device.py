"""Device behaviour: mode entry, display updates, sleeping and the main loop."""

from __future__ import annotations

import math

from .backlight import Backlight
from .battery import battery_flag
from .config import (
    BL_BUTTON_PIN,
    BL_DEBOUNCE_MS,
    DHT_PWR,
    DHT_SETTLE_MS,
    HIGH,
    LCD_COLUMNS,
    LCD_ROWS,
    LOW,
    MODE_DEBOUNCE_MS,
    MODE_PIN,
    MODE_REENTRY_GUARD_MS,
    MODE_SWITCH_SUPPRESS_MS,
    UPDATE_INTERVAL_SEC,
)
from .hardware import CharacterLcd, SimulatedBoard, SimulatedRtc, SimulatedSensor, SqwMode
from .interrupts import BUTTON_BIT, RX_BIT, SWITCH_BIT, TICK_BIT, PinChangeMonitor
from .scheduler import AlarmScheduler
from .state import AppState, DeviceMode
from .time_commands import TimeCommandProcessor
from .ui_format import (
    build_clock_lines,
    build_hygro_line1,
    build_hygro_line2,
    format_elapsed,
    format_elapsed_millis,
    pad16,
)

BANNER = (
    "Clock mode serial cmds: RD | CT[=±offset] | "
    "T=YYYY-MM-DD HH:MM:SS | U=<unix_epoch>"
)

_U32 = 0xFFFFFFFF


def _u32(value: int) -> int:
    return value & _U32


def _s32(value: int) -> int:
    value &= _U32
    return value - 0x100000000 if value >= 0x80000000 else value


class Device:
    """The hygrometer/clock: owns state, scheduler, backlight and command handling."""

    def __init__(
        self,
        board: SimulatedBoard,
        lcd: CharacterLcd,
        sensor: SimulatedSensor,
        rtc: SimulatedRtc | None = None,
    ) -> None:
        self.board = board
        self.lcd = lcd
        self.sensor = sensor
        self.rtc = rtc
        self.state = AppState()
        self.monitor = PinChangeMonitor(self.state)
        self.scheduler = AlarmScheduler(rtc)
        self.backlight = Backlight(board, self._current_seconds)
        self.commands = TimeCommandProcessor(rtc, board.serial_write)
        self.battery_voltage = 3.90
        self._last_clock_second: int | None = None
        self._last_soft_second: int | None = None
        self._ms_carry = 0
        self._last_tick_epoch: int | None = None
        board.time_listeners.append(self._on_time)

    # ---- time and pins ----

    def _on_time(self, ms: int) -> None:
        if self.rtc is None:
            return
        self._ms_carry += ms
        seconds, self._ms_carry = divmod(self._ms_carry, 1000)
        if seconds:
            self.rtc.advance(seconds)

    def _current_seconds(self) -> int:
        return self.state.current_seconds(self.rtc)

    def _sqw_level(self) -> int:
        if self.rtc is not None and self.rtc.sqw_mode is SqwMode.OFF:
            return LOW if self.rtc.alarm_fired(1) else HIGH
        return HIGH

    def _port_d(self) -> int:
        pins = RX_BIT  # receive line idles high
        if self.board.digital_read(MODE_PIN):
            pins |= SWITCH_BIT
        if self._sqw_level():
            pins |= TICK_BIT
        return pins

    def _port_b(self) -> int:
        return BUTTON_BIT if self.board.digital_read(BL_BUTTON_PIN) else 0

    def _poll_pins(self) -> None:
        """Deliver pending pin changes to the interrupt handlers."""
        pins = self._port_d()
        if self.board.serial_available():
            self.monitor.on_port_d_change(pins & ~RX_BIT)
        rtc = self.rtc
        if (
            rtc is not None
            and rtc.sqw_mode is SqwMode.SQUARE_WAVE_1HZ
            and rtc.epoch != self._last_tick_epoch
        ):
            self._last_tick_epoch = rtc.epoch
            self.monitor.on_port_d_change(pins & ~TICK_BIT)
        self.monitor.on_port_d_change(pins)
        self.monitor.on_port_b_change(self._port_b())

    def _power_down(self, seconds: int) -> None:
        """Sleep up to seconds, waking early on a clock tick or alarm."""
        duration = seconds
        rtc = self.rtc
        if rtc is not None:
            if rtc.sqw_mode is SqwMode.SQUARE_WAVE_1HZ and self.monitor.pcmsk2 & TICK_BIT:
                duration = min(duration, 1)
            elif (
                rtc.sqw_mode is SqwMode.OFF
                and rtc.alarm1 is not None
                and rtc.epoch < rtc.alarm1
            ):
                duration = min(duration, rtc.alarm1 - rtc.epoch)
        self.board.power_down(duration)
        self._poll_pins()

    def _any_wake(self) -> bool:
        s = self.state
        return s.tick_wake or s.switch_wake or s.bl_button_wake or s.serial_wake

    def _show(self, row: int, text: str) -> None:
        self.lcd.set_cursor(0, row)
        self.lcd.print(pad16(text))

    def _read_battery(self) -> float:
        return self.battery_voltage

    def _handle_serial(self) -> None:
        data = []
        while self.board.serial_available():
            data.append(self.board.serial_read())
        if data:
            self.commands.feed("".join(data))

    # ---- setup and loop ----

    def setup(self) -> None:
        """Power-on initialisation: pins, splash screen, clock and first mode."""
        board = self.board
        board.digital_write(DHT_PWR, LOW)
        board.delay(80)
        self._show(0, "DIY Hygrometer ")
        self._show(1, "LCD+DHT22+RTC  ")
        board.delay(800)

        state = self.state
        if self.rtc is not None:
            state.rtc_available = True
            self.rtc.write_sqw_pin_mode(SqwMode.SQUARE_WAVE_1HZ)
            state.start_time_rtc = self.rtc.now()
            state.mode_start_rtc = state.start_time_rtc
            self._last_tick_epoch = self.rtc.epoch
            board.serial_write(BANNER + "\r\n")

        state.start_millis = board.millis()
        state.mode_start_millis = board.millis()
        state.mode_sleep_seconds_accum = 0
        state.soft_seconds = 0
        state.sys_seconds = 0

        self.monitor.init_core_pins(self._port_d())
        self.monitor.init_backlight_button(self._port_b())
        self.backlight.off()

        self.enter_mode(self.read_switch_mode())
        state.last_stable_mode = state.current_mode
        state.last_mode_enter_ms = board.millis()
        state.last_mode_read_ms = state.last_mode_enter_ms

    def read_switch_mode(self) -> DeviceMode:
        """Raw slide switch position: grounded means hygrometer."""
        if self.board.digital_read(MODE_PIN) == LOW:
            return DeviceMode.HYGRO
        return DeviceMode.CLOCK

    def enter_mode(self, mode: DeviceMode) -> None:
        """Switch to a mode: configure the clock output, show a banner, sample."""
        state = self.state
        board = self.board
        state.current_mode = DeviceMode(mode)
        self.monitor.mask_switch(True)
        if state.current_mode is DeviceMode.HYGRO:
            if state.rtc_available:
                state.mode_start_rtc = self.rtc.now()
                epoch = int(state.mode_start_rtc.timestamp())
                self.scheduler.start(epoch)
                self.monitor.enable_tick(True)
                state.last_pins_d = self._port_d()
                self._show(0, "Mode: Hygrometer")
                self._show(1, "Init...")
                board.delay(50)
                self.update_hygro_mode()
                self.scheduler.mark_sample(epoch)
            else:
                state.mode_start_millis = board.millis()
                state.last_hygro_update_millis = 0
                state.mode_sleep_seconds_accum = 0
                self.monitor.enable_tick(True)
                state.last_pins_d = self._port_d()
                self._show(0, "Mode: Hygrometer")
                self._show(1, "Init...")
                board.delay(50)
                self.update_hygro_mode()
        else:
            if state.rtc_available:
                self.rtc.clear_alarm(1)
                self.rtc.clear_alarm(2)
                self.rtc.write_sqw_pin_mode(SqwMode.SQUARE_WAVE_1HZ)
            self.monitor.enable_tick(True)
            state.last_pins_d = self._port_d()
            self._show(0, "Mode: Clock     ")
            self._show(1, "RTC OK" if state.rtc_available else "No RTC")
            board.delay(50)
            state.serial_awake_until = _u32(board.millis() + 1200)
        state.last_mode_enter_ms = board.millis()

    def update_clock_mode(self) -> None:
        """Redraw the clock screen when the displayed second changes."""
        state = self.state
        if state.rtc_available:
            now = self.rtc.now()
            if now.second == self._last_clock_second:
                return
            self._last_clock_second = now.second
            line1, line2 = build_clock_lines(now, 0, self._read_battery())
        else:
            if state.soft_seconds == self._last_soft_second:
                return
            self._last_soft_second = state.soft_seconds
            line1, line2 = build_clock_lines(None, state.soft_seconds, self._read_battery())
        self._show(0, line1)
        self._show(1, line2)
        self.backlight.maintain(self._current_seconds())

    def update_hygro_mode(self) -> None:
        """Power the sensor, take a reading and redraw the hygrometer screen."""
        state = self.state
        board = self.board
        board.digital_write(DHT_PWR, HIGH)
        board.delay(DHT_SETTLE_MS)
        humidity = self.sensor.read_humidity()
        temperature = self.sensor.read_temperature()
        if math.isnan(humidity) or math.isnan(temperature):
            board.delay(400)
            humidity = self.sensor.read_humidity()
            temperature = self.sensor.read_temperature()
        board.digital_write(DHT_PWR, LOW)
        vbat = self._read_battery()
        self._show(0, build_hygro_line1(temperature, humidity))

        if state.rtc_available:
            now_epoch = self.rtc.epoch
            base = self.scheduler.base_epoch()
            elapsed = format_elapsed(now_epoch - base if now_epoch > base else 0)
        else:
            awake_ms = _u32(board.millis() - state.mode_start_millis)
            elapsed_ms = _u32(awake_ms + state.mode_sleep_seconds_accum * 1000)
            elapsed = format_elapsed_millis(elapsed_ms)

        rtc_flag = "R" if state.rtc_available else "T"
        self._show(1, build_hygro_line2(elapsed, rtc_flag, vbat, battery_flag(vbat)))
        self.backlight.maintain(self._current_seconds())

    def drain_serial(self, ms: int = 250) -> None:
        """Stay awake for ms milliseconds servicing serial commands."""
        board = self.board
        start = board.millis()
        while _s32(board.millis() - start) < ms:
            self._handle_serial()
            if not board.serial_available():
                board.delay(2)
        self.state.serial_wake = False

    def _serial_awake(self) -> bool:
        return _s32(self.state.serial_awake_until - self.board.millis()) > 0

    def loop_once(self) -> None:
        """One pass of the main loop, ending in sleep unless kept awake."""
        state = self.state
        board = self.board
        self._poll_pins()

        raw_mode = self.read_switch_mode()
        now_ms = board.millis()
        if raw_mode != state.last_stable_mode:
            if _u32(now_ms - state.last_mode_read_ms) >= MODE_DEBOUNCE_MS:
                state.last_stable_mode = raw_mode
                state.last_mode_read_ms = now_ms
                state.switch_wake = True
        else:
            state.last_mode_read_ms = now_ms

        if state.switch_wake and state.last_stable_mode != state.current_mode:
            if _u32(now_ms - state.last_mode_enter_ms) >= MODE_REENTRY_GUARD_MS:
                state.clear_wake_flags()
                self.enter_mode(state.last_stable_mode)
            else:
                state.switch_wake = False
        elif state.switch_wake:
            state.switch_wake = False

        if _u32(now_ms - state.last_mode_enter_ms) >= MODE_SWITCH_SUPPRESS_MS:
            self.monitor.mask_switch(False)

        if state.bl_button_wake or board.digital_read(BL_BUTTON_PIN) == LOW:
            press_ms = board.millis()
            if _u32(press_ms - state.bl_last_handled_ms) > BL_DEBOUNCE_MS:
                state.bl_last_handled_ms = press_ms
                state.bl_button_wake = False
                self.backlight.on()
            else:
                state.bl_button_wake = False

        if self.backlight.is_active():
            state.serial_awake_until = _u32(board.millis() + 1500)
        if state.serial_wake or board.serial_available():
            state.serial_awake_until = _u32(board.millis() + 1200)
            state.serial_wake = False
            self.drain_serial(300)

        if state.current_mode is DeviceMode.CLOCK:
            self._clock_pass()
        elif state.rtc_available:
            self._hygro_pass()
        else:
            self._hygro_fallback_pass()

    def _clock_pass(self) -> None:
        state = self.state
        if self._serial_awake():
            self._handle_serial()
        self.update_clock_mode()
        if self._serial_awake():
            self.drain_serial(60)
            return
        if state.rtc_available:
            self._sleep_until_tick_or_switch()
        else:
            self._power_down(1)
            state.soft_seconds += 1
            state.sys_seconds += 1

    def _hygro_pass(self) -> None:
        now_epoch = self.rtc.epoch
        if self.scheduler.should_fire(now_epoch):
            self.scheduler.advance_after_fire(now_epoch)
            self.update_hygro_mode()
            self.scheduler.mark_sample(now_epoch)
        self.scheduler.sanity(now_epoch)
        if self.scheduler.failsafe_check(now_epoch):
            self.update_hygro_mode()
            self.scheduler.mark_sample(now_epoch)
        if self._serial_awake():
            self._handle_serial()
            self.board.delay(5)
            return
        self._sleep_until_alarm_or_switch()

    def _hygro_fallback_pass(self) -> None:
        state = self.state
        board = self.board
        now_ms = board.millis()
        if state.last_hygro_update_millis == 0 or _u32(
            now_ms - state.last_hygro_update_millis
        ) >= UPDATE_INTERVAL_SEC * 1000:
            self.update_hygro_mode()
            state.last_hygro_update_millis = board.millis()
        if self._serial_awake():
            board.delay(5)
            return
        elapsed = _u32(board.millis() - state.last_hygro_update_millis) // 1000
        remain = 0 if elapsed >= UPDATE_INTERVAL_SEC else UPDATE_INTERVAL_SEC - elapsed
        if remain > 0:
            timed_out, slept = self._sleep_until_next_or_switch(remain)
            state.mode_sleep_seconds_accum += slept
            state.sys_seconds += slept
            if timed_out:
                state.last_hygro_update_millis = 0

    # ---- sleeping ----

    def _sleep_until_alarm_or_switch(self) -> None:
        state = self.state
        state.tick_wake = False
        while not self._any_wake():
            self._power_down(8)
            if self._any_wake():
                break
            if state.rtc_available:
                now_epoch = self.rtc.epoch
                if self.scheduler.failsafe_check(now_epoch):
                    self.update_hygro_mode()
                    self.scheduler.mark_sample(now_epoch)
                    break

    def _sleep_until_next_or_switch(self, remain: int) -> tuple[bool, int]:
        state = self.state
        original = remain
        state.tick_wake = False
        while remain > 0:
            chunk = 8 if remain >= 8 else 4 if remain >= 4 else 2 if remain >= 2 else 1
            self._power_down(chunk)
            if self._any_wake():
                break
            remain -= chunk
        state.tick_wake = False
        return remain == 0, original - remain

    def _sleep_until_tick_or_switch(self) -> None:
        state = self.state
        state.tick_wake = False
        while not self._any_wake():
            self._power_down(8)
        state.tick_wake = False


__all__ = ["BANNER", "Device", "LCD_COLUMNS", "LCD_ROWS"]