from hygrostat.backlight import Backlight
from hygrostat.config import BACKLIGHT_DURATION_SEC, BACKLIGHT_PIN, HIGH, LOW
from hygrostat.hardware import SimulatedBoard


def _make(start=100):
    board = SimulatedBoard()
    clock = [start]
    light = Backlight(board, lambda: clock[0])
    return board, clock, light


def test_initially_off():
    board, _, light = _make()
    assert not light.is_active()
    assert board.digital_read(BACKLIGHT_PIN) == LOW


def test_on_records_start_and_drives_pin():
    board, clock, light = _make(start=500)
    light.on()
    assert light.is_active()
    assert light.start_seconds() == 500
    assert board.digital_read(BACKLIGHT_PIN) == HIGH


def test_maintain_turns_off_after_duration():
    board, _, light = _make(start=100)
    light.on()
    light.maintain(100 + BACKLIGHT_DURATION_SEC - 1)
    assert light.is_active()
    light.maintain(100 + BACKLIGHT_DURATION_SEC)
    assert not light.is_active()
    assert board.digital_read(BACKLIGHT_PIN) == LOW


def test_maintain_handles_counter_wrap():
    start = 0xFFFFFFFF - 2
    _, _, light = _make(start=start)
    light.on()
    light.maintain(1)
    assert light.is_active()
    light.maintain(BACKLIGHT_DURATION_SEC)
    assert not light.is_active()


def test_maintain_ignores_earlier_time():
    _, _, light = _make(start=1000)
    light.on()
    light.maintain(900)
    assert light.is_active()


def test_off_when_inactive_stays_off():
    board, _, light = _make()
    light.off()
    assert not light.is_active()
    assert board.digital_read(BACKLIGHT_PIN) == LOW