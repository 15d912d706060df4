"""concentrator_reset package: GPIO/command reset sequencing for LoRa concentrators."""

from .config import Configuration, ConfigError, PinBinding, ResetCommand
from .errors import ChipAccessError, CommandError, LineClaimError, LineIOError, ResetError
from .registry import PinRegistry
from .runtime import reset, setup_pins
from .sequencer import ResetSequencer

__all__ = [
    "ChipAccessError",
    "CommandError",
    "ConfigError",
    "Configuration",
    "LineClaimError",
    "LineIOError",
    "PinBinding",
    "PinRegistry",
    "ResetCommand",
    "ResetError",
    "ResetSequencer",
    "reset",
    "setup_pins",
]
