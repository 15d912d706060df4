"""Reset configuration model for concentrator_reset.

Binds the four logical reset signals to physical GPIO lines and carries the
optional list of external reset commands. Loads from YAML or JSON files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json

import yaml

PIN_FIELDS = ("chip_reset", "chip_power_enable", "companion_radio_reset", "dac_reset")


class ConfigError(ValueError):
    """Raised when a reset configuration file is malformed."""


@dataclass(frozen=True)
class PinBinding:
    """Physical GPIO line (chip device + line offset) for one logical signal."""

    chip_device: str
    line_offset: int

    def __post_init__(self) -> None:
        if not self.chip_device:
            raise ConfigError("chip_device must be non-empty")
        if isinstance(self.line_offset, bool) or int(self.line_offset) < 0:
            raise ConfigError(f"line_offset must be a non-negative integer, got {self.line_offset!r}")
        object.__setattr__(self, "line_offset", int(self.line_offset))

    def __str__(self) -> str:
        return f"{self.chip_device}:{self.line_offset}"


@dataclass(frozen=True)
class ResetCommand:
    """External program plus its arguments."""

    program: str
    args: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]


@dataclass(frozen=True)
class Configuration:
    """Optional pin bindings and reset commands; the default configures nothing."""

    chip_reset: Optional[PinBinding] = None
    chip_power_enable: Optional[PinBinding] = None
    companion_radio_reset: Optional[PinBinding] = None
    dac_reset: Optional[PinBinding] = None
    reset_commands: Optional[Tuple[ResetCommand, ...]] = None
    check_exit: bool = True

    def __post_init__(self) -> None:
        for name in PIN_FIELDS:
            value = getattr(self, name)
            if value is None or isinstance(value, PinBinding):
                continue
            if not isinstance(value, (tuple, list)):
                raise ConfigError(f"{name} must be a PinBinding or (chip, line) pair, got {value!r}")
            object.__setattr__(self, name, _binding(name, list(value)))

        commands = self.reset_commands
        if commands is not None:
            if not isinstance(commands, (list, tuple)):
                raise ConfigError(f"reset_commands must be a sequence, got {commands!r}")
            object.__setattr__(
                self,
                "reset_commands",
                tuple(_command_pair(idx, entry) for idx, entry in enumerate(commands)),
            )

    def pin_bindings(self) -> List[Tuple[str, PinBinding]]:
        """Return configured (signal, binding) pairs in setup order."""
        pins: List[Tuple[str, PinBinding]] = []
        for name in PIN_FIELDS:
            binding = getattr(self, name)
            if binding is not None:
                pins.append((name, binding))
        return pins

    @classmethod
    def load(cls, path: str | Path) -> "Configuration":
        """Load a configuration from a YAML or JSON file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Missing configuration file: {path}")
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
        else:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Build a configuration from already-parsed mapping data."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")
        unknown = set(data) - set(PIN_FIELDS) - {"reset_commands", "check_exit"}
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

        pins = {name: _binding(name, data.get(name)) for name in PIN_FIELDS}
        commands = data.get("reset_commands")
        if commands is not None:
            if not isinstance(commands, list):
                raise ConfigError("reset_commands must be a list")
            commands = [_command(idx, entry) for idx, entry in enumerate(commands)]

        return cls(
            reset_commands=commands,
            check_exit=bool(data.get("check_exit", True)),
            **pins,
        )


def _binding(name: str, value: Any) -> Optional[PinBinding]:
    """Parse {chip, line} or [chip, line] into a PinBinding."""
    if value is None:
        return None
    if isinstance(value, dict):
        chip = value.get("chip", value.get("chip_device"))
        line = value.get("line", value.get("line_offset"))
    elif isinstance(value, list) and len(value) == 2:
        chip, line = value
    else:
        raise ConfigError(f"{name} must be {{chip, line}} or [chip, line], got {value!r}")
    if not isinstance(chip, str) or not chip:
        raise ConfigError(f"{name}: chip must be a non-empty string")
    if isinstance(line, bool) or not isinstance(line, int):
        raise ConfigError(f"{name}: line must be an integer, got {line!r}")
    try:
        return PinBinding(chip, line)
    except ConfigError as exc:
        raise ConfigError(f"{name}: {exc}") from exc


def _command(idx: int, value: Any) -> ResetCommand:
    """Parse [program, *args] or {program, args} into a ResetCommand."""
    if isinstance(value, dict):
        program = value.get("program")
        args = value.get("args") or []
    elif isinstance(value, list) and value:
        program, args = value[0], value[1:]
    else:
        raise ConfigError(f"reset_commands[{idx}] must be a list or mapping, got {value!r}")
    if not isinstance(program, str) or not program:
        raise ConfigError(f"reset_commands[{idx}]: program must be a non-empty string")
    if not isinstance(args, list):
        raise ConfigError(f"reset_commands[{idx}]: args must be a list")
    return ResetCommand(program, tuple(str(arg) for arg in args))


def _command_pair(idx: int, value: Any) -> ResetCommand:
    """Accept a ResetCommand or a (program, args) pair."""
    if isinstance(value, ResetCommand):
        return value
    if not isinstance(value, tuple) or len(value) != 2:
        raise ConfigError(f"reset_commands[{idx}] must be a ResetCommand or (program, args) pair, got {value!r}")
    program, args = value
    if not isinstance(program, str) or not program:
        raise ConfigError(f"reset_commands[{idx}]: program must be a non-empty string")
    if isinstance(args, (str, bytes)) or not isinstance(args, (list, tuple)):
        raise ConfigError(f"reset_commands[{idx}]: args must be a list")
    return ResetCommand(program, tuple(args))
