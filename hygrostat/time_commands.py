"""Serial commands for reading and setting the real-time clock."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, timezone

from .hardware import SimulatedRtc, SqwMode

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]+)")
_HMS = re.compile(r"([0-9]+):([0-9]+):([0-9]+) *")
_LONG_MIN = -(1 << 31)
_LONG_MAX = (1 << 31) - 1
_ULONG_MAX = (1 << 32) - 1

HELP_LINES = (
    "Commands: RD | CT[=±offset] | T=YYYY-MM-DD HH:MM:SS | U=<unix_epoch>",
    "CT offset examples: CT=+10  CT -45  CT=+01:02:03",
)


def _leading_int(text: str) -> tuple[int | None, str]:
    match = _LEADING_INT.match(text)
    if match is None:
        return None, text
    sign, digits = match.groups()
    value = int(digits)
    return (-value if sign == "-" else value), text[match.end():]


def _atoi(text: str) -> int:
    value, _ = _leading_int(text)
    return 0 if value is None else value


def _strtol(text: str) -> tuple[int, str]:
    value, rest = _leading_int(text)
    if value is None:
        return 0, text
    return max(_LONG_MIN, min(_LONG_MAX, value)), rest


def _strtoul(text: str) -> int:
    value, _ = _leading_int(text)
    if value is None:
        return 0
    if abs(value) > _ULONG_MAX:
        return _ULONG_MAX
    return value % (1 << 32)


def parse_ymdhms(text: str) -> datetime:
    """Parse 'YYYY-MM-DD HH:MM:SS' into a UTC datetime; ValueError if malformed."""
    if len(text) < 19:
        raise ValueError(f"timestamp too short: {text!r}")
    if (text[4], text[7], text[10], text[13], text[16]) != ("-", "-", " ", ":", ":"):
        raise ValueError(f"timestamp separators wrong: {text!r}")
    year = _atoi(text)
    month = _atoi(text[5:])
    day = _atoi(text[8:])
    hour = _atoi(text[11:])
    minute = _atoi(text[14:])
    second = _atoi(text[17:])
    if not (
        year >= 2000
        and 1 <= month <= 12
        and 1 <= day <= 31
        and 0 <= hour <= 23
        and 0 <= minute <= 59
        and 0 <= second <= 59
    ):
        raise ValueError(f"timestamp field out of range: {text!r}")
    try:
        return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError as exc:
        raise ValueError(f"invalid date: {text!r}") from exc


def parse_offset_seconds(text: str) -> int:
    """Parse a signed offset given as seconds or HH:MM:SS; ValueError if malformed."""
    s = text.lstrip(" ")
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    s = s.lstrip(" ")
    first_token = s.split(" ", 1)[0]
    if ":" in first_token:
        match = _HMS.fullmatch(s)
        if match is None:
            raise ValueError(f"bad HH:MM:SS offset: {text!r}")
        hours, minutes, seconds = (int(part) for part in match.groups())
        return sign * (hours * 3600 + minutes * 60 + seconds)
    value, rest = _strtol(s)
    if rest.lstrip(" "):
        raise ValueError(f"bad offset: {text!r}")
    return sign * value


def normalize_line(line: str) -> str:
    """Trim spaces and upper-case the command word (up to a space or '=')."""
    text = line.strip(" ")
    head = re.match(r"[^ =]*", text).group(0)
    return head.upper() + text[len(head):]


def _epoch_of(moment: datetime | int) -> int:
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    return int(moment)


class TimeCommandProcessor:
    """Line-buffered serial command handler; a missing clock rejects every command."""

    BUFFER_LIMIT = 63

    def __init__(
        self,
        rtc: SimulatedRtc | None,
        output: Callable[[str], None],
        build_time: datetime | int | None = None,
    ) -> None:
        self._rtc = rtc
        self._output = output
        if build_time is None:
            build_time = datetime.now(timezone.utc).replace(microsecond=0)
        self._build_epoch = _epoch_of(build_time)
        self._buffer: list[str] = []

    def _print(self, text: str) -> None:
        self._output(text)

    def _println(self, text: str = "") -> None:
        self._output(text + "\r\n")

    def _print_rtc(self) -> None:
        if self._rtc is None:
            self._println("[RTC] not available")
            return
        self._println("[RTC] " + self._rtc.now().strftime("%Y-%m-%dT%H:%M:%S"))

    def _set_clock(self, moment: datetime | int) -> None:
        self._rtc.adjust(moment)
        self._rtc.write_sqw_pin_mode(SqwMode.SQUARE_WAVE_1HZ)

    def process(self, line: str) -> None:
        """Execute one normalized command line."""
        if self._rtc is None:
            self._println("[RTC] not available or bad command")
            return
        if line in ("R", "D", "RD"):
            self._print_rtc()
            return
        if line.startswith("C"):
            self._compile_time_command(line[2:] if line[1:2] == "T" else line[1:])
            return
        if line.startswith("T="):
            try:
                moment = parse_ymdhms(line[2:].lstrip(" "))
            except ValueError:
                self._println("[ERR] Use T=YYYY-MM-DD HH:MM:SS")
                return
            self._set_clock(moment)
            self._println("[RTC] set to given timestamp")
            self._print_rtc()
            return
        if line.startswith("U="):
            self._set_clock(_strtoul(line[2:].lstrip(" ")))
            self._println("[RTC] set from UNIX epoch")
            self._print_rtc()
            return
        for help_line in HELP_LINES:
            self._println(help_line)

    def _compile_time_command(self, argument: str) -> None:
        argument = argument.lstrip(" ")
        if argument.startswith("="):
            argument = argument[1:].lstrip(" ")
        has_offset = bool(argument)
        offset = 0
        if has_offset:
            try:
                offset = parse_offset_seconds(argument)
            except ValueError:
                self._println("[ERR] CT offset: seconds or HH:MM:SS")
                return
        self._set_clock(max(0, self._build_epoch + offset))
        self._print("[RTC] set to compile time")
        if has_offset:
            self._print(f" + {offset}s")
        self._println()
        self._print_rtc()

    def feed(self, data: str) -> None:
        """Consume received characters, running each completed line."""
        for ch in data:
            if ch in "\r\n":
                line = normalize_line("".join(self._buffer))
                self._buffer.clear()
                if line:
                    self.process(line)
            elif len(self._buffer) < self.BUFFER_LIMIT:
                self._buffer.append(ch)