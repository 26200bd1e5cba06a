import math
from datetime import datetime

import pytest

from hygrostat.config import DEGREE_CHAR
from hygrostat.ui_format import (
    build_clock_lines,
    build_hygro_line1,
    build_hygro_line2,
    format_elapsed,
    format_elapsed_millis,
    format_float,
    pad16,
)


def test_pad16_pads_short_text():
    result = pad16("abc")
    assert len(result) == 16
    assert result.startswith("abc") and result[3:].strip() == ""


def test_pad16_truncates_long_text():
    text = "DIY Hygrometer with extra words"
    assert pad16(text) == text[:16]


def test_format_float_width_and_value():
    text = format_float(2.5, 8, 2)
    assert len(text) == 8
    assert float(text) == pytest.approx(2.5)


def test_format_float_negative_width_left_aligns():
    text = format_float(1.5, -6, 1)
    assert text.rstrip() == format_float(1.5, 1, 1)
    assert len(text) == 6


def test_clock_lines_midnight():
    line1, line2 = build_clock_lines(datetime(2024, 3, 5, 0, 0, 0), 0, 4.1)
    assert line1.startswith("12:00:00 AM")
    assert line2 == "05/03/24 4.10V F"


def test_clock_lines_noon_is_pm():
    line1, _ = build_clock_lines(datetime(2024, 3, 5, 12, 30, 0), 0, 3.8)
    assert "PM" in line1


@pytest.mark.parametrize("hour", [0, 1, 11, 12, 13, 23])
def test_clock_lines_soft_matches_rtc(hour):
    rtc_line1, _ = build_clock_lines(datetime(2024, 1, 1, hour, 7, 9), 0, 3.9)
    soft_line1, soft_line2 = build_clock_lines(None, hour * 3600 + 7 * 60 + 9, 3.9)
    assert soft_line1 == rtc_line1
    assert soft_line2.startswith("No RTC")


def test_clock_lines_soft_wraps_daily():
    assert build_clock_lines(None, 5000, 3.6) == build_clock_lines(None, 5000 + 86400, 3.6)


def test_clock_lines_fit_display():
    for line in build_clock_lines(datetime(2099, 12, 31, 23, 59, 59), 0, 3.3):
        assert len(line) <= 16


def test_hygro_line1_sensor_error():
    assert build_hygro_line1(math.nan, 50.0) == "SENSOR ERROR"
    assert build_hygro_line1(21.0, math.nan) == "SENSOR ERROR"


def test_hygro_line1_contents():
    line = build_hygro_line1(21.4, 55.0)
    assert chr(DEGREE_CHAR) + "C" in line
    assert "RH 55%" in line
    assert len(line) <= 16


def test_hygro_line1_rounds_half_away_from_zero():
    assert build_hygro_line1(20.0, 42.5).endswith("43%")


def test_hygro_line2_short_elapsed():
    line = build_hygro_line2("0d00:05", "R", 3.9, "M")
    assert line.startswith("E0d00:05R ")
    assert line.endswith("VM")
    assert len(line) <= 16


def test_hygro_line2_long_elapsed_drops_space():
    line = build_hygro_line2("123d04:05", "T", 3.9, "M")
    assert line.startswith("E123d04:05T")
    assert " " not in line
    assert len(line) <= 16


def test_format_elapsed_zero():
    assert format_elapsed(0) == "0d00:00"


def test_format_elapsed_minute_resolution():
    assert format_elapsed(59) == format_elapsed(0)
    assert format_elapsed(86400).startswith("1d")


@pytest.mark.parametrize("seconds", [0, 61, 3599, 90061, 10 * 86400 + 5])
def test_millis_and_seconds_agree(seconds):
    assert format_elapsed_millis(seconds * 1000) == format_elapsed(seconds)


def test_format_elapsed_rejects_negative():
    with pytest.raises(ValueError):
        format_elapsed(-1)
    with pytest.raises(ValueError):
        format_elapsed_millis(-1)