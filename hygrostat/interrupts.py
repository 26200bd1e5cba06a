"""Pin-change interrupt masks and the handlers that set wake flags."""

from __future__ import annotations

from .config import BL_BUTTON_PIN, MODE_PIN, SQW_PIN
from .state import AppState, DeviceMode

PCIE0 = 1 << 0
PCIE2 = 1 << 2

SWITCH_BIT = 1 << MODE_PIN  # PD4 / PCINT20
TICK_BIT = 1 << SQW_PIN  # PD5 / PCINT21
RX_BIT = 1 << 0  # PD0 / PCINT16
BUTTON_BIT = 1 << (BL_BUTTON_PIN - 8)  # PB2 / PCINT2


class PinChangeMonitor:
    """Models the pin-change interrupt registers and their service routines."""

    def __init__(self, state: AppState) -> None:
        self.state = state
        self.pcicr = 0
        self.pcmsk0 = 0
        self.pcmsk2 = 0

    def init_core_pins(self, pins_d: int) -> None:
        """Enable the mode switch, tick and serial receive pins."""
        self.state.last_pins_d = pins_d & 0xFF
        self.pcmsk2 |= SWITCH_BIT | TICK_BIT | RX_BIT
        self.pcicr |= PCIE2
        self.state.clear_wake_flags()

    def enable_tick(self, enabled: bool) -> None:
        if enabled:
            self.pcmsk2 |= TICK_BIT
        else:
            self.pcmsk2 &= ~TICK_BIT
        self.state.tick_wake = False

    def init_backlight_button(self, pins_b: int) -> None:
        self.state.last_pins_b = pins_b & 0xFF
        self.pcmsk0 |= BUTTON_BIT
        self.pcicr |= PCIE0
        self.state.bl_button_wake = False

    def mask_switch(self, mask: bool) -> None:
        """Mask or unmask the slide switch to suppress chatter."""
        if mask:
            self.pcmsk2 &= ~SWITCH_BIT
        else:
            self.pcmsk2 |= SWITCH_BIT

    def on_port_d_change(self, pins: int) -> bool:
        """New port D levels; returns True if the interrupt was serviced."""
        pins &= 0xFF
        state = self.state
        changed = pins ^ state.last_pins_d
        if not self.pcicr & PCIE2 or not changed & self.pcmsk2:
            return False
        state.last_pins_d = pins
        if changed & SWITCH_BIT:
            state.switch_wake = True
        if changed & TICK_BIT:
            high = bool(pins & TICK_BIT)
            # Clock mode counts the rising 1 Hz edge; hygrometer mode the falling alarm.
            if high == (state.current_mode == DeviceMode.CLOCK):
                state.tick_wake = True
        if changed & RX_BIT:
            state.serial_wake = True
        return True

    def on_port_b_change(self, pins: int) -> bool:
        """New port B levels; returns True if the interrupt was serviced."""
        pins &= 0xFF
        state = self.state
        changed = pins ^ state.last_pins_b
        if not self.pcicr & PCIE0 or not changed & self.pcmsk0:
            return False
        state.last_pins_b = pins
        if changed & BUTTON_BIT and not pins & BUTTON_BIT:
            state.bl_button_wake = True
        return True