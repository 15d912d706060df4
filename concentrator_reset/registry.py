"""Pin registry owning the concentrator reset lines for the process lifetime.

Each logical signal lives in its own lock-guarded slot. Slots are configured
once by ``setup_pins`` and only read afterwards; there is no cross-slot
atomicity, so callers that may reset from several threads must serialize
whole ``reset()`` calls themselves.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging
import threading

from .config import PIN_FIELDS, Configuration, ResetCommand
from .errors import LineClaimError, ResetError
from .gpio import GpioBackend, GpioLine, LibgpiodBackend, chip_path
from .gpio_claims import GpioClaimRegistry

LOGGER = logging.getLogger(__name__)

CONSUMER_LABELS = {
    "chip_reset": "sx130x_reset",
    "chip_power_enable": "sx1302_power_en",
    "companion_radio_reset": "sx1261_reset",
    "dac_reset": "ad5338r_reset",
}

SIGNAL_DESCRIPTIONS = {
    "chip_reset": "reset",
    "chip_power_enable": "sx1302 power enable",
    "companion_radio_reset": "sx1261 reset",
    "dac_reset": "ad5338r reset",
}


class GuardedSlot:
    """Single optional value behind its own mutex."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._value: Optional[Any] = None

    @contextmanager
    def locked(self) -> Iterator[Optional[Any]]:
        with self._lock:
            yield self._value

    def is_set(self) -> bool:
        with self._lock:
            return self._value is not None

    def assign(self, value: Any) -> None:
        """Store ``value``; caller must hold the slot via ``locked()``."""
        self._value = value


class PinRegistry:
    """Owns the GPIO line handles and reset commands used by the sequencer."""

    def __init__(self, gpio: Optional[GpioBackend] = None, claims: Optional[GpioClaimRegistry] = None) -> None:
        self._gpio = gpio
        self.claims = claims or GpioClaimRegistry()
        self._slots: Dict[str, GuardedSlot] = {name: GuardedSlot(name) for name in PIN_FIELDS}
        self._commands = GuardedSlot("reset_commands")
        self.check_exit = True

    @property
    def gpio(self) -> GpioBackend:
        if self._gpio is None:
            self._gpio = LibgpiodBackend()
        return self._gpio

    def setup_pins(self, configuration: Configuration) -> None:
        """Acquire every configured line (initially LOW) and store reset commands.

        Stops at the first failure; slots configured before it stay configured.
        """
        for name, binding in configuration.pin_bindings():
            LOGGER.info(
                "Configuring %s pin, dev: %s, pin: %s",
                SIGNAL_DESCRIPTIONS[name],
                binding.chip_device,
                binding.line_offset,
            )
            slot = self._slots[name]
            with slot.locked() as current:
                if current is not None:
                    raise LineClaimError(f"Signal {name} is already configured")
                self._acquire(slot, binding.chip_device, binding.line_offset)

        if configuration.reset_commands is not None:
            LOGGER.info("Configuring raw reset commands")
            with self._commands.locked():
                self._commands.assign(configuration.reset_commands)
            self.check_exit = configuration.check_exit

    def _acquire(self, slot: GuardedSlot, chip_device: str, line_offset: int) -> None:
        gpio = self.gpio
        path = chip_path(chip_device)
        self.claims.claim_line(slot.name, path, line_offset)
        try:
            line = gpio.request_output(chip_device, line_offset, CONSUMER_LABELS[slot.name], initial=False)
        except ResetError:
            self.claims.release_line(path, line_offset)
            raise
        slot.assign(line)

    @contextmanager
    def line(self, name: str) -> Iterator[Optional[GpioLine]]:
        """Hold the slot for ``name`` and yield its line (None if not configured)."""
        with self._slots[name].locked() as line:
            yield line

    @contextmanager
    def commands(self) -> Iterator[Optional[Tuple[ResetCommand, ...]]]:
        with self._commands.locked() as commands:
            yield commands

    def configured_signals(self) -> List[str]:
        """Return the signals holding a line, in setup order (for diagnostics)."""
        return [name for name in PIN_FIELDS if self._slots[name].is_set()]

    def describe(self) -> List[Tuple[str, str]]:
        """Return (signal, owner line) pairs for diagnostics."""
        return [(claim.owner, f"{claim.chip_device}:{claim.line_offset}") for claim in self.claims.snapshot()]
