"""Process-wide reset runtime: one registry claimed once, reused for every reset."""

from __future__ import annotations

from typing import Optional
import threading

from .config import Configuration
from .gpio import GpioBackend
from .registry import PinRegistry
from .sequencer import ResetSequencer

_LOCK = threading.Lock()
_REGISTRY: Optional[PinRegistry] = None


def default_registry(gpio: Optional[GpioBackend] = None) -> PinRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _REGISTRY
    with _LOCK:
        if _REGISTRY is None:
            _REGISTRY = PinRegistry(gpio)
        return _REGISTRY


def setup_pins(configuration: Configuration) -> None:
    """Configure the process-wide registry from ``configuration``."""
    default_registry().setup_pins(configuration)


def reset() -> None:
    """Run the reset sequence against the process-wide registry."""
    ResetSequencer(default_registry()).reset()
