"""Error types raised while configuring or resetting the concentrator."""

from __future__ import annotations


class ResetError(RuntimeError):
    """Base error for concentrator setup/reset failures."""

    kind = "reset"


class ChipAccessError(ResetError):
    """Raised when a GPIO chip device is missing or cannot be opened."""

    kind = "chip_access"


class LineClaimError(ResetError):
    """Raised when a GPIO line is invalid or already owned by another consumer."""

    kind = "line_claim"


class LineIOError(ResetError):
    """Raised when setting a line level fails in the driver."""

    kind = "io"


class CommandError(ResetError):
    """Raised when a reset command fails to launch or exits non-zero."""

    kind = "command"

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
