"""Simulated hygrometer and clock device with RTC alarm scheduling, LCD output and serial time commands."""

__version__ = "0.1.0"
__all__ = [
    "backlight",
    "battery",
    "config",
    "device",
    "hardware",
    "interrupts",
    "scheduler",
    "state",
    "time_commands",
    "ui_format",
]