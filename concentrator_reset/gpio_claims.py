"""Process-local GPIO ownership tracking to stop two signals sharing a line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple
import threading

from .errors import LineClaimError

LineKey = Tuple[str, int]


@dataclass(frozen=True)
class GpioClaim:
    chip_device: str
    line_offset: int
    owner: str


class GpioClaimRegistry:
    """Track (chip, line) ownership with hard-fail collision semantics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner_by_line: Dict[LineKey, str] = {}

    def claim_line(self, owner: str, chip_device: str, line_offset: int) -> None:
        if not owner:
            raise LineClaimError("GPIO owner must be non-empty")
        key = (chip_device, int(line_offset))
        with self._lock:
            existing = self._owner_by_line.get(key)
            if existing is not None:
                raise LineClaimError(f"GPIO line {key[1]} on {chip_device} already claimed by {existing}")
            self._owner_by_line[key] = owner

    def release_line(self, chip_device: str, line_offset: int) -> None:
        with self._lock:
            self._owner_by_line.pop((chip_device, int(line_offset)), None)

    def snapshot(self) -> list[GpioClaim]:
        with self._lock:
            return [
                GpioClaim(chip_device=chip, line_offset=line, owner=owner)
                for (chip, line), owner in sorted(self._owner_by_line.items())
            ]
