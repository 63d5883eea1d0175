"""
Process entry for the random-employee service.

Settings are resolved once here and handed to each component. Startup
failures end up at this single exit path:

* `ConfigError` -> exit status 2, nothing is bound
* any other `StartupError` (bind, readiness write) -> exit status 1
* clean shutdown -> exit status 0
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from dotenv import find_dotenv, load_dotenv

from random_employee.api.server import create_app
from random_employee.config import ConfigError, load_config
from random_employee.errors import StartupError
from random_employee.observability.logging import configure_logging, get_logger
from random_employee.shutdown import ShutdownCoordinator
from random_employee.startup import StartupSequencer

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_STARTUP_FAILED = 1
EXIT_CONFIG_INVALID = 2


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="random-employee",
        description="Run the random-employee HTTP service.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a random_employee.toml file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the service until it is stopped and return the exit status."""

    args = _parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        settings = load_config(args.config)
    except ConfigError as exc:
        logger.error("configuration_invalid", error=str(exc))
        return EXIT_CONFIG_INVALID

    configure_logging(level=settings.log_level, format=settings.log_format)

    coordinator = ShutdownCoordinator()
    app = create_app(settings, coordinator)
    sequencer = StartupSequencer(settings, app, coordinator)

    try:
        asyncio.run(sequencer.run())
    except StartupError as exc:
        logger.error(
            "startup_failed",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return EXIT_STARTUP_FAILED

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
