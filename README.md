# hygrostat

A model of a small battery-powered device that works either as a hygrometer
or as a 12-hour clock, showing its readings on a 16x2 character LCD. The
device logic runs against simulated hardware (board, clock, sensor, display),
so it can be driven step by step and inspected from Python.

## What it does

- **Hygrometer mode** (`hygrostat.device.Device`, `hygrostat.scheduler.AlarmScheduler`).
  Takes temperature and humidity samples on a 30-second grid, triggered by
  the clock's alarm 1. A sanity check realigns the schedule when the next
  sample lies more than 90 seconds ahead, and a failsafe reschedules sampling
  after 120 seconds without a sample. Without a real-time clock the device
  falls back to a timed sleep in 8/4/2/1-second chunks.
- **Clock mode.** Shows the time as `HH:MM:SS AM/PM`, the date and the
  battery voltage with a level flag from `hygrostat.battery.battery_flag`
  (`F` at 4.00 V and above, `M` from 3.70 V, `L` from 3.50 V, `!` below).
- **Backlight** (`hygrostat.backlight.Backlight`). A press of the backlight
  button turns it on; `maintain()`, called on each display update, turns it
  off once ten seconds have passed.
- **Mode switch.** The slide switch on `config.MODE_PIN` selects the mode:
  LOW means hygrometer, HIGH means clock. Changes are debounced (80 ms) and
  guarded against rapid re-entry (300 ms).
- **Serial time commands** (`hygrostat.time_commands.TimeCommandProcessor`):
  - `R`, `D` or `RD` print the clock time.
  - `CT[=±offset]` (or `C...`) sets the build time plus an offset given in
    seconds or as `HH:MM:SS`.
  - `T=YYYY-MM-DD HH:MM:SS` sets a given timestamp.
  - `U=<unix_epoch>` sets a Unix epoch.
  - Anything else prints a short help text.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Build a device from the simulated parts and run its main loop one pass at a
time:

```python
from hygrostat.config import LOW, MODE_PIN
from hygrostat.device import Device
from hygrostat.hardware import CharacterLcd, SimulatedBoard, SimulatedRtc, SimulatedSensor

board = SimulatedBoard()
board.digital_write(MODE_PIN, LOW)          # slide switch to hygrometer
lcd = CharacterLcd(16, 2)
sensor = SimulatedSensor(humidity=45.0, temperature=21.5)
rtc = SimulatedRtc(1_700_000_000)

device = Device(board, lcd, sensor, rtc)
device.setup()
device.loop_once()

print(lcd.line(0))
print(lcd.line(1))
print(board.serial_output)
```

Passing `rtc=None` runs the device without a real-time clock.
`SimulatedSensor` accepts a single value or a sequence of readings; the last
one repeats. The battery voltage the device reports is the
`Device.battery_voltage` attribute (3.90 V by default).

The formatting helpers work on their own:

```python
from hygrostat.battery import battery_flag
from hygrostat.ui_format import format_elapsed, pad16

format_elapsed(3 * 3600 + 125)   # '0d03:02'
pad16("Init...")                 # padded to 16 characters
battery_flag(3.8)                # 'M'
```

Serial commands go through `TimeCommandProcessor`. `feed()` takes text, and
each line ended by CR or LF is trimmed, its command word upper-cased, and
executed:

```python
from hygrostat.hardware import SimulatedRtc
from hygrostat.time_commands import TimeCommandProcessor, parse_offset_seconds

out = []
processor = TimeCommandProcessor(SimulatedRtc(1_700_000_000), out.append, build_time=0)
processor.feed("rd\n")
"".join(out)                         # '[RTC] 2023-11-14T22:13:20\r\n'

parse_offset_seconds("+01:02:03")    # 3723
```

## What it does not do

The package drives no real hardware: the board, clock, sensor, LCD and
pin-change interrupts are all simulated objects, and battery voltage is a
plain attribute rather than an ADC measurement (`battery.vcc_from_bandgap`
and `battery.battery_volts` only do the conversion arithmetic). There is no
command-line program; the device is used from Python code.