"""Command-line entry point: configure the reset lines and pulse the concentrator."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import ConfigError, Configuration
from .errors import ResetError
from .gpio import NullGpioBackend
from .registry import PinRegistry
from .sequencer import ResetSequencer

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for a one-shot reset."""
    parser = argparse.ArgumentParser(description="LoRa concentrator GPIO reset")
    parser.add_argument("--config", required=True, help="Path to reset configuration (YAML or JSON)")
    parser.add_argument("--dry-run", action="store_true", help="Use an in-memory GPIO backend instead of libgpiod")
    parser.add_argument("--setup-only", action="store_true", help="Claim the lines but skip the reset sequence")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    """Set up basic logging for the CLI."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for running the reset sequence once."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        configuration = Configuration.load(args.config)
    except ConfigError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1

    registry = PinRegistry(NullGpioBackend() if args.dry_run else None)
    try:
        registry.setup_pins(configuration)
        LOGGER.info("Configured signals: %s", ", ".join(registry.configured_signals()) or "none")
        for owner, line in registry.describe():
            LOGGER.debug("Claimed %s for %s", line, owner)
        if not args.setup_only:
            ResetSequencer(registry).reset()
    except ResetError as exc:
        LOGGER.error("Concentrator reset failed (%s): %s", exc.kind, exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
