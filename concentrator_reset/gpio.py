"""GPIO access layer for concentrator_reset (libgpiod-backed)."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
import logging
import threading

from .errors import ChipAccessError, LineClaimError, LineIOError

LOGGER = logging.getLogger(__name__)


def chip_path(chip_device: str) -> str:
    """Resolve a bare chip name such as gpiochip0 to its /dev path."""
    if chip_device.startswith("/"):
        return chip_device
    return f"/dev/{chip_device}"


class GpioLine:
    """A claimed, output-configured GPIO line."""

    consumer = ""

    def set_value(self, value: bool) -> None:
        raise NotImplementedError

    def release(self) -> None:
        return


class GpioBackend:
    """Abstract GPIO backend: opens chips and requests output lines."""

    def request_output(self, chip_device: str, line_offset: int, consumer: str, initial: bool = False) -> GpioLine:
        raise NotImplementedError


class NullGpioLine(GpioLine):
    def __init__(self, backend: "NullGpioBackend", key: Tuple[str, int], consumer: str, initial: bool) -> None:
        self._backend = backend
        self.key = key
        self.consumer = consumer
        self.value = 1 if initial else 0

    def set_value(self, value: bool) -> None:
        if self.key in self._backend.failing_writes:
            raise LineIOError(f"I/O error setting {self.consumer} on {self.key[0]}:{self.key[1]}")
        self.value = 1 if value else 0
        self._backend.record(self.consumer, self.value)

    def release(self) -> None:
        self._backend.release(self.key)


class NullGpioBackend(GpioBackend):
    """In-memory GPIO backend for dry runs and tests; records every level change."""

    def __init__(
        self,
        *,
        missing_chips: Iterable[str] = (),
        unavailable_lines: Iterable[Tuple[str, int]] = (),
        failing_writes: Iterable[Tuple[str, int]] = (),
    ) -> None:
        self.missing_chips: Set[str] = set(missing_chips)
        self.unavailable_lines: Set[Tuple[str, int]] = {(chip, int(line)) for chip, line in unavailable_lines}
        self.failing_writes: Set[Tuple[str, int]] = {(chip, int(line)) for chip, line in failing_writes}
        self.lines: Dict[Tuple[str, int], NullGpioLine] = {}
        self.events: List[Tuple[str, int]] = []
        self._lock = threading.Lock()

    def request_output(self, chip_device: str, line_offset: int, consumer: str, initial: bool = False) -> GpioLine:
        if chip_device in self.missing_chips:
            raise ChipAccessError(f"Cannot open GPIO chip {chip_device}")
        key = (chip_device, int(line_offset))
        with self._lock:
            if key in self.unavailable_lines or key in self.lines:
                raise LineClaimError(f"GPIO line {line_offset} on {chip_device} is unavailable")
            line = NullGpioLine(self, key, consumer, initial)
            self.lines[key] = line
        return line

    def record(self, consumer: str, value: int) -> None:
        with self._lock:
            self.events.append((consumer, value))

    def release(self, key: Tuple[str, int]) -> None:
        with self._lock:
            self.lines.pop(key, None)


class LibgpiodLine(GpioLine):
    def __init__(self, adapter: "LibgpiodBackend", chip: Any, handle: Any, line_offset: int, consumer: str) -> None:
        self._adapter = adapter
        self._chip = chip
        self._handle = handle
        self._offset = line_offset
        self.consumer = consumer

    def set_value(self, value: bool) -> None:
        try:
            self._adapter.write(self._handle, self._offset, value)
        except OSError as exc:
            raise LineIOError(f"I/O error setting {self.consumer} (line {self._offset}): {exc}") from exc

    def release(self) -> None:
        self._adapter.release_handle(self._handle)
        self._adapter.release_handle(self._chip)


class LibgpiodBackend(GpioBackend):
    """libgpiod-backed GPIO backend (supports v1/v2 APIs)."""

    def __init__(self) -> None:
        self._backend = ""
        self._gpiod = self._load_gpiod()
        self._init_backend()

    def _load_gpiod(self):
        try:
            import gpiod
        except ImportError as exc:
            raise ChipAccessError("gpiod is required for GPIO access (install python3-libgpiod)") from exc
        return gpiod

    def _init_backend(self) -> None:
        if hasattr(self._gpiod, "request_lines"):
            self._backend = "v2"
            line_mod = getattr(self._gpiod, "line", None)
            self._Direction = getattr(self._gpiod, "LineDirection", None) or getattr(line_mod, "Direction", None)
            self._Value = getattr(self._gpiod, "LineValue", None) or getattr(line_mod, "Value", None)
            self._LineSettings = getattr(self._gpiod, "LineSettings", None) or getattr(line_mod, "LineSettings", None)
            if not all((self._Direction, self._Value, self._LineSettings)):
                raise ChipAccessError("Unsupported gpiod v2 API")
        else:
            self._backend = "v1"
            self._Value = None
        LOGGER.debug("Using gpiod %s API", self._backend)

    def request_output(self, chip_device: str, line_offset: int, consumer: str, initial: bool = False) -> GpioLine:
        path = chip_path(chip_device)
        try:
            chip = self._gpiod.Chip(path)
        except (OSError, ValueError) as exc:
            raise ChipAccessError(f"Cannot open GPIO chip {chip_device}: {exc}") from exc

        try:
            handle = self._request(chip, path, int(line_offset), consumer, initial)
        except (OSError, ValueError) as exc:
            self.release_handle(chip)
            raise LineClaimError(f"Cannot request GPIO line {line_offset} on {chip_device}: {exc}") from exc
        return LibgpiodLine(self, chip, handle, int(line_offset), consumer)

    def _request(self, chip: Any, path: str, line_offset: int, consumer: str, initial: bool) -> Any:
        if self._backend == "v2":
            settings = self._LineSettings(direction=self._Direction.OUTPUT, output_value=self._encode_value(initial))
            if hasattr(chip, "request_lines"):
                return chip.request_lines(consumer=consumer, config={line_offset: settings})
            return self._gpiod.request_lines(path, consumer=consumer, config={line_offset: settings})

        line_obj = chip.get_line(line_offset)
        line_obj.request(
            consumer=consumer,
            type=self._gpiod.LINE_REQ_DIR_OUT,
            default_vals=[1 if initial else 0],
        )
        return line_obj

    def write(self, handle: Any, line_offset: int, value: bool) -> None:
        if self._backend == "v2":
            encoded = self._encode_value(value)
            if hasattr(handle, "set_value"):
                handle.set_value(line_offset, encoded)
                return
            if hasattr(handle, "set_values"):
                handle.set_values({line_offset: encoded})
                return
            raise LineIOError("Unsupported gpiod request API for set_value")

        handle.set_value(1 if value else 0)

    @staticmethod
    def release_handle(handle: Optional[Any]) -> None:
        if handle is None:
            return
        release = getattr(handle, "release", None)
        if callable(release):
            try:
                release()
            except OSError:
                pass
            return
        close = getattr(handle, "close", None)
        if callable(close):
            try:
                close()
            except OSError:
                pass

    def _encode_value(self, value: bool):
        if self._Value is not None:
            return self._Value.ACTIVE if value else self._Value.INACTIVE
        return 1 if value else 0
