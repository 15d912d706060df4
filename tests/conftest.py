from __future__ import annotations

from typing import List

import pytest

from concentrator_reset.gpio import NullGpioBackend
from concentrator_reset.registry import PinRegistry
from concentrator_reset.sequencer import ResetSequencer


class Recorder:
    """Shared timeline of line writes, sleeps and command runs."""

    def __init__(self, backend: NullGpioBackend) -> None:
        self.backend = backend
        self.returncodes: dict = {}
        self.launch_failures: set = set()

    @property
    def timeline(self) -> list:
        return self.backend.events

    def sleep(self, seconds: float) -> None:
        self.backend.events.append(("sleep", seconds))

    def run(self, argv: List[str]) -> int:
        if argv[0] in self.launch_failures:
            raise FileNotFoundError(2, "No such file or directory", argv[0])
        self.backend.events.append(("run", tuple(argv)))
        return self.returncodes.get(argv[0], 0)


@pytest.fixture
def backend() -> NullGpioBackend:
    return NullGpioBackend()


@pytest.fixture
def recorder(backend: NullGpioBackend) -> Recorder:
    return Recorder(backend)


@pytest.fixture
def registry(backend: NullGpioBackend) -> PinRegistry:
    return PinRegistry(backend)


@pytest.fixture
def sequencer(registry: PinRegistry, recorder: Recorder) -> ResetSequencer:
    return ResetSequencer(registry, sleep=recorder.sleep, runner=recorder.run)
