from datetime import datetime, timezone

import pytest

from hygrostat.config import HIGH, LOW
from hygrostat.hardware import (
    CharacterLcd,
    SimulatedBoard,
    SimulatedRtc,
    SimulatedSensor,
    SqwMode,
)


def test_rtc_adjust_round_trip():
    rtc = SimulatedRtc()
    moment = datetime(2024, 6, 1, 8, 30, 15, tzinfo=timezone.utc)
    rtc.adjust(moment)
    assert rtc.now() == moment


def test_rtc_adjust_accepts_epoch_and_naive():
    rtc = SimulatedRtc()
    rtc.adjust(datetime(2024, 6, 1, 8, 30, 15))
    epoch = rtc.epoch
    rtc.adjust(epoch)
    assert rtc.now().replace(tzinfo=None) == datetime(2024, 6, 1, 8, 30, 15)


def test_rtc_advance():
    rtc = SimulatedRtc(1000)
    rtc.advance(25)
    assert rtc.epoch == 1025


def test_rtc_alarm_fires_when_crossed():
    rtc = SimulatedRtc(1000)
    rtc.set_alarm1(1030)
    rtc.advance(29)
    assert not rtc.alarm_fired(1)
    rtc.advance(1)
    assert rtc.alarm_fired(1)
    rtc.clear_alarm(1)
    assert not rtc.alarm_fired(1)


def test_rtc_rejects_bad_alarm_and_backwards():
    rtc = SimulatedRtc(0)
    with pytest.raises(ValueError):
        rtc.alarm_fired(3)
    with pytest.raises(ValueError):
        rtc.advance(-1)


def test_rtc_sqw_mode():
    rtc = SimulatedRtc(0)
    rtc.write_sqw_pin_mode(SqwMode.OFF)
    assert rtc.sqw_mode is SqwMode.OFF


def test_lcd_print_and_line():
    lcd = CharacterLcd(16, 2)
    lcd.set_cursor(0, 1)
    lcd.print("RTC OK")
    assert lcd.line(1) == "RTC OK".ljust(16)
    assert lcd.line(0) == " " * 16


def test_lcd_drops_text_past_width():
    lcd = CharacterLcd(4, 1)
    lcd.set_cursor(0, 0)
    lcd.print("abcdef")
    assert lcd.line(0) == "abcd"


def test_lcd_rejects_out_of_range():
    lcd = CharacterLcd(16, 2)
    with pytest.raises(ValueError):
        lcd.set_cursor(0, 2)
    with pytest.raises(ValueError):
        lcd.line(5)


def test_sensor_queue_repeats_last():
    sensor = SimulatedSensor(humidity=[float("nan"), 45.0], temperature=22.0)
    first = sensor.read_humidity()
    assert first != first
    assert sensor.read_humidity() == 45.0
    assert sensor.read_humidity() == 45.0
    assert sensor.read_temperature() == 22.0


def test_board_time_and_listeners():
    board = SimulatedBoard()
    seen = []
    board.time_listeners.append(seen.append)
    board.delay(250)
    board.power_down(8)
    assert board.millis() == 250 + 8000
    assert seen == [250, 8000]
    assert board.sleeps == [8]


def test_board_pins_default_high():
    board = SimulatedBoard()
    assert board.digital_read(4) == HIGH
    board.digital_write(4, LOW)
    assert board.digital_read(4) == LOW


def test_board_serial_round_trip():
    board = SimulatedBoard()
    board.serial_feed("RD\n")
    assert board.serial_available() == 3
    assert "".join(board.serial_read() for _ in range(3)) == "RD\n"
    with pytest.raises(IndexError):
        board.serial_read()
    board.serial_write("hello")
    assert board.serial_output == "hello"