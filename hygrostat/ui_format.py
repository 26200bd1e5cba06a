"""Text layout for the 16x2 character display."""

from __future__ import annotations

import math
from datetime import datetime

from .battery import battery_flag
from .config import DEGREE_CHAR, LCD_COLUMNS

_LINE_MAX = LCD_COLUMNS  # buffers hold 16 characters plus terminator


def pad16(text: str) -> str:
    """Pad with spaces or truncate to exactly 16 characters."""
    return text[:LCD_COLUMNS].ljust(LCD_COLUMNS)


def format_float(value: float, width: int, precision: int) -> str:
    """Fixed-point text, right-aligned to width (left-aligned if negative)."""
    align = "<" if width < 0 else ">"
    return f"{value:{align}{abs(width)}.{precision}f}"


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _to_12h(hour: int) -> tuple[int, bool]:
    if hour == 0:
        return 12, False
    if hour == 12:
        return 12, True
    if hour > 12:
        return hour - 12, True
    return hour, False


def build_clock_lines(
    now: datetime | None, soft_seconds: int, vbat: float
) -> tuple[str, str]:
    """Both clock-mode lines; without a clock reading, soft_seconds is used."""
    if now is not None:
        hour, minute, second = now.hour, now.minute, now.second
    else:
        hour = (soft_seconds // 3600) % 24
        minute = (soft_seconds // 60) % 60
        second = soft_seconds % 60
    hour12, pm = _to_12h(hour)
    vb = format_float(vbat, 1, 2)[:7]
    flag = battery_flag(vbat)
    line1 = f"{hour12:02d}:{minute:02d}:{second:02d} {'PM' if pm else 'AM'}  Batt"
    if now is not None:
        line2 = f"{now.day:02d}/{now.month:02d}/{now.year % 100:02d} {vb}V {flag}"
    else:
        line2 = f"No RTC   {vb}V {flag}"
    return line1[:_LINE_MAX], line2[:_LINE_MAX]


def build_hygro_line1(temperature: float, humidity: float) -> str:
    """Temperature and relative humidity line, or a sensor error notice."""
    if math.isnan(humidity) or math.isnan(temperature):
        return "SENSOR ERROR"
    tbuf = format_float(temperature, 4, 1)[:7]
    line = f"{tbuf:>4}{chr(DEGREE_CHAR)}C  RH {_round_half_away(humidity):2d}%"
    return line[:_LINE_MAX]


def build_hygro_line2(elapsed: str, rtc_flag: str, vbat: float, bat_flag: str) -> str:
    """Elapsed time, time-source flag and battery line; fits by length."""
    if len(elapsed) <= 7:
        vb = format_float(vbat, 4, 2)[:9]
        line = f"E{elapsed}{rtc_flag} {vb}V{bat_flag}"
    elif len(elapsed) == 8:
        vb = format_float(vbat, 3, 1)[:9]
        line = f"E{elapsed}{rtc_flag} {vb}V{bat_flag}"
    else:
        vb = format_float(vbat, 1, 0)[:9]
        line = f"E{elapsed}{rtc_flag}{vb}V{bat_flag}"
    return line[:_LINE_MAX]


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 1440}d{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def format_elapsed(seconds: int) -> str:
    """Elapsed seconds as 'DdHH:MM' (minutes resolution)."""
    if seconds < 0:
        raise ValueError("elapsed seconds must not be negative")
    return _format_minutes(seconds // 60)


def format_elapsed_millis(ms: int) -> str:
    """Elapsed milliseconds as 'DdHH:MM' (minutes resolution)."""
    if ms < 0:
        raise ValueError("elapsed milliseconds must not be negative")
    return _format_minutes((ms // 1000) // 60)