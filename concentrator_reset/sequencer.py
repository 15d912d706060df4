"""Fixed-timing reset sequence for the concentrator board."""

from __future__ import annotations

from typing import Callable, List, Optional
import logging
import subprocess
import time

from .config import ResetCommand
from .errors import CommandError
from .gpio import GpioLine
from .registry import PinRegistry

LOGGER = logging.getLogger(__name__)

STEP_DELAY_S = 0.1

CommandRunner = Callable[[List[str]], int]


def run_command(argv: List[str]) -> int:
    """Run a reset command to completion with its output discarded; return the exit code."""
    completed = subprocess.run(
        argv,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return completed.returncode


class ResetSequencer:
    """Drive the configured reset lines and commands in the fixed hardware order.

    Every step is optional and skipped when its signal was never configured:

    1. power enable HIGH (board power)
    2. concentrator reset pulse, active-high
    3. companion radio reset pulse, active-low
    4. DAC reset pulse, active-low
    5. reset commands, in configured order

    Each level change or command is followed by a blocking 100 ms wait. The
    first error aborts the remaining steps and nothing already done is undone.
    """

    def __init__(
        self,
        registry: PinRegistry,
        *,
        sleep: Optional[Callable[[float], None]] = None,
        runner: CommandRunner = run_command,
        delay_s: float = STEP_DELAY_S,
        check_exit: Optional[bool] = None,
    ) -> None:
        self.registry = registry
        self._sleep = sleep or time.sleep
        self._runner = runner
        self._delay_s = delay_s
        self._check_exit = check_exit

    def reset(self) -> None:
        with self.registry.line("chip_power_enable") as power_en:
            if power_en is not None:
                LOGGER.info("Enabling concentrator power")
                self._set(power_en, True)

        with self.registry.line("chip_reset") as chip_reset:
            if chip_reset is not None:
                LOGGER.info("Triggering sx1302 reset")
                self._pulse(chip_reset, active=True)

        with self.registry.line("companion_radio_reset") as radio_reset:
            if radio_reset is not None:
                LOGGER.info("Triggering sx1261 reset")
                self._pulse(radio_reset, active=False)

        with self.registry.line("dac_reset") as dac_reset:
            if dac_reset is not None:
                LOGGER.info("Triggering AD5338R reset")
                self._pulse(dac_reset, active=False)

        with self.registry.commands() as commands:
            if commands is not None:
                for command in commands:
                    self._run(command)

    def _set(self, line: GpioLine, value: bool) -> None:
        line.set_value(value)
        self._sleep(self._delay_s)

    def _pulse(self, line: GpioLine, active: bool) -> None:
        self._set(line, active)
        self._set(line, not active)

    def _run(self, command: ResetCommand) -> None:
        LOGGER.info("Executing reset command, command: %s, args: %s", command.program, list(command.args))
        try:
            returncode = self._runner(command.argv)
        except OSError as exc:
            raise CommandError(f"Failed to launch reset command {command.program}: {exc}") from exc
        if returncode != 0:
            check_exit = self.registry.check_exit if self._check_exit is None else self._check_exit
            if check_exit:
                raise CommandError(
                    f"Reset command {command.program} exited with status {returncode}",
                    returncode=returncode,
                )
            LOGGER.warning("Reset command %s exited with status %s", command.program, returncode)
        self._sleep(self._delay_s)
