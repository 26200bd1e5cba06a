"""Battery voltage conversion and charge classification."""

from __future__ import annotations

from collections.abc import Iterable

R_TOP = 180000.0
R_BOT = 330000.0
VBAT_CAL = 0.9975308642

VBAT_FULL_TH = 4.00
VBAT_MED_TH = 3.70
VBAT_LOW_TH = 3.50

ADC_FULL_SCALE = 1023.0
BANDGAP_VOLTS = 1.1


def battery_flag(volts: float) -> str:
    """Classify a battery voltage as 'F', 'M', 'L' or '!'."""
    if volts >= VBAT_FULL_TH:
        return "F"
    if volts >= VBAT_MED_TH:
        return "M"
    if volts >= VBAT_LOW_TH:
        return "L"
    return "!"


def vcc_from_bandgap(raw: int) -> float:
    """Supply voltage from an ADC reading of the internal 1.1 V reference."""
    if raw <= 0:
        raise ValueError("bandgap reading must be positive")
    return (BANDGAP_VOLTS * ADC_FULL_SCALE) / float(raw)


def battery_volts(adc_samples: Iterable[float], vcc: float) -> float:
    """Calibrated battery voltage from averaged divider ADC samples."""
    samples = list(adc_samples)
    if not samples:
        raise ValueError("at least one ADC sample is required")
    adc = sum(samples) / len(samples)
    v_pin = adc * vcc / ADC_FULL_SCALE
    v_battery = v_pin * (R_TOP + R_BOT) / R_BOT
    return v_battery * VBAT_CAL