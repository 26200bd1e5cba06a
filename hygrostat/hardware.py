"""Simulated peripherals: real-time clock, character LCD, sensor and board."""

from __future__ import annotations

import enum
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from .config import HIGH, LOW


class SqwMode(enum.Enum):
    """Output mode of the clock's SQW/INT pin."""

    OFF = "off"
    SQUARE_WAVE_1HZ = "1hz"
    SQUARE_WAVE_1KHZ = "1khz"
    SQUARE_WAVE_4KHZ = "4khz"
    SQUARE_WAVE_8KHZ = "8khz"


def _to_epoch(moment: datetime | int) -> int:
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(moment.timestamp())
    return int(moment)


class SimulatedRtc:
    """A battery-backed clock with alarm 1 matching a full timestamp."""

    def __init__(self, epoch: int = 0) -> None:
        self.epoch = int(epoch)
        self.alarm1: int | None = None
        self.sqw_mode = SqwMode.SQUARE_WAVE_1HZ
        self._fired = {1: False, 2: False}

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.epoch, tz=timezone.utc)

    def adjust(self, moment: datetime | int) -> None:
        self.epoch = _to_epoch(moment)

    def advance(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("the clock cannot run backwards")
        before = self.epoch
        self.epoch += int(seconds)
        if self.alarm1 is not None and before < self.alarm1 <= self.epoch:
            self._fired[1] = True

    def set_alarm1(self, epoch: datetime | int) -> None:
        self.alarm1 = _to_epoch(epoch)

    def _check_alarm(self, alarm: int) -> None:
        if alarm not in self._fired:
            raise ValueError(f"no such alarm: {alarm}")

    def clear_alarm(self, alarm: int) -> None:
        self._check_alarm(alarm)
        self._fired[alarm] = False

    def alarm_fired(self, alarm: int) -> bool:
        self._check_alarm(alarm)
        return self._fired[alarm]

    def write_sqw_pin_mode(self, mode: SqwMode) -> None:
        self.sqw_mode = SqwMode(mode)


class CharacterLcd:
    """A character display holding rows of fixed width."""

    def __init__(self, columns: int = 16, rows: int = 2) -> None:
        if columns <= 0 or rows <= 0:
            raise ValueError("display must have at least one row and column")
        self.columns = columns
        self.rows = rows
        self._cells = [[" "] * columns for _ in range(rows)]
        self._column = 0
        self._row = 0

    def set_cursor(self, column: int, row: int) -> None:
        if not 0 <= column < self.columns or not 0 <= row < self.rows:
            raise ValueError(f"cursor ({column}, {row}) outside display")
        self._column = column
        self._row = row

    def print(self, text: str) -> None:
        for ch in text:
            if self._column < self.columns:
                self._cells[self._row][self._column] = ch
            self._column += 1

    def line(self, row: int) -> str:
        if not 0 <= row < self.rows:
            raise ValueError(f"row {row} outside display")
        return "".join(self._cells[row])


class SimulatedSensor:
    """Humidity/temperature sensor returning queued readings; the last repeats."""

    def __init__(
        self,
        humidity: float | Iterable[float] = 50.0,
        temperature: float | Iterable[float] = 20.0,
    ) -> None:
        self._humidity = self._queue(humidity)
        self._temperature = self._queue(temperature)

    @staticmethod
    def _queue(values: float | Iterable[float]) -> deque[float]:
        if isinstance(values, (int, float)):
            return deque([float(values)])
        queue = deque(float(v) for v in values)
        if not queue:
            raise ValueError("at least one reading is required")
        return queue

    @staticmethod
    def _next(queue: deque[float]) -> float:
        return queue.popleft() if len(queue) > 1 else queue[0]

    def read_humidity(self) -> float:
        return self._next(self._humidity)

    def read_temperature(self) -> float:
        return self._next(self._temperature)


class SimulatedBoard:
    """Microcontroller board: millisecond clock, pins, sleep and serial port."""

    def __init__(self) -> None:
        self._ms = 0
        self._pins: dict[int, int] = {}
        self._rx: deque[str] = deque()
        self._tx: list[str] = []
        self.sleeps: list[int] = []
        self.time_listeners: list[Callable[[int], None]] = []

    def _elapse(self, ms: int) -> None:
        if ms < 0:
            raise ValueError("time cannot run backwards")
        self._ms += ms
        for listener in self.time_listeners:
            listener(ms)

    def millis(self) -> int:
        return self._ms & 0xFFFFFFFF

    def delay(self, ms: int) -> None:
        self._elapse(int(ms))

    def digital_read(self, pin: int) -> int:
        return self._pins.get(pin, HIGH)

    def digital_write(self, pin: int, level: int) -> None:
        self._pins[pin] = HIGH if level else LOW

    def power_down(self, seconds: int) -> None:
        self.sleeps.append(seconds)
        self._elapse(int(seconds) * 1000)

    def serial_feed(self, data: str) -> None:
        self._rx.extend(data)

    def serial_available(self) -> int:
        return len(self._rx)

    def serial_read(self) -> str:
        if not self._rx:
            raise IndexError("serial receive buffer is empty")
        return self._rx.popleft()

    def serial_write(self, text: str) -> None:
        self._tx.append(text)

    @property
    def serial_output(self) -> str:
        return "".join(self._tx)