from __future__ import annotations

import argparse
import logging
import sys
import threading
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cfrestart.app import restart_application
from cfrestart.config import (
    ConfigurationError,
    configure_logging,
    get_restart_config,
    get_target_defaults,
)
from cfrestart.domain.model import RestartTarget

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

_cancellation = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Restart a Cloud Foundry application and tail its logs until it is running"
    )
    parser.add_argument(
        "--org",
        type=str,
        help="Organization containing the application (defaults to CF_ORGANIZATION)",
    )
    parser.add_argument(
        "--space",
        type=str,
        help="Space containing the application (defaults to CF_SPACE)",
    )
    parser.add_argument(
        "--app",
        type=str,
        help="Name of the application to restart (defaults to CF_APP_NAME)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between status polls (defaults to CFRESTART_POLL_INTERVAL or 3)",
    )
    parser.add_argument(
        "--skip-ssl-validation",
        action="store_true",
        default=None,
        help="Do not verify TLS certificates of the controller and log endpoints",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _build_target(args: argparse.Namespace) -> RestartTarget:
    defaults = get_target_defaults()
    return RestartTarget.from_names(
        args.org or defaults.organization,
        args.space or defaults.space,
        args.app or defaults.application,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    cancellation: threading.Event | None = None,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        target = _build_target(parsed_args)
        restart_config = get_restart_config(poll_interval_seconds=parsed_args.poll_interval)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    result = restart_application(
        target,
        cancellation=cancellation or _cancellation,
        restart_config=restart_config,
        skip_ssl_validation=parsed_args.skip_ssl_validation,
    )
    if not result.succeeded:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C): cancel the restart watch, exit on the second press."""
    if _cancellation.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(130)
    log.info("Cancelling; waiting for the current status poll to finish")
    _cancellation.set()


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
