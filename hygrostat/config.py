"""Build-time settings, timing constants and pin assignments."""

# Feature toggles
ENABLE_SERIAL_RTC_CMDS = True
ENABLE_SERIAL_DEBUG = False

# Timing
UPDATE_INTERVAL_SEC = 30
DHT_SETTLE_MS = 1800
BACKLIGHT_DURATION_SEC = 10
BL_DEBOUNCE_MS = 150

# Alarm / failsafe
ENABLE_ALARM_FAILSAFE = True
ALARM_FAILSAFE_SEC = 120
ALARM_MAX_AHEAD_SEC = 90

# Mode switch debounce
MODE_DEBOUNCE_MS = 80
MODE_REENTRY_GUARD_MS = 300
MODE_SWITCH_SUPPRESS_MS = 120

# Sensor
DHTTYPE = "DHT22"

# Logic levels
LOW = 0
HIGH = 1

# LCD geometry and pins (HD44780, 4-bit)
LCD_COLUMNS = 16
LCD_ROWS = 2
LCD_RS = 12
LCD_EN = 11
LCD_D4 = 6
LCD_D5 = 7
LCD_D6 = 8
LCD_D7 = 9

# Sensors and I/O
DHTPIN = 2
DHT_PWR = 3
VBAT_PIN = 14  # A0
MODE_PIN = 4  # slide to GND = hygrometer
SQW_PIN = 5  # DS3231 INT/SQW
BACKLIGHT_PIN = 13
BL_BUTTON_PIN = 10
DEGREE_CHAR = 223