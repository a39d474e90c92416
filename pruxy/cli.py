"""Command-line interface for pruxy."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import PruxyApp
from .config import PruxyConfig, apply_overrides, load_config
from .core import ConfigurationError
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pruxy",
        description="PrusaLink proxy with a Prometheus metrics endpoint",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--bind", help="The address to bind to (e.g. :8080)")
    parser.add_argument("--address", help="The URI of the printer")
    parser.add_argument("--username", help="The username for the printer")
    parser.add_argument(
        "--password",
        help=f"The password for the printer (default: ${constants.PASSWORD_ENV_VAR})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for each metrics request to the printer",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("start", help="Start the proxy and metrics server")
    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def resolve_config(args: argparse.Namespace) -> PruxyConfig:
    config = load_config(args.config)
    return apply_overrides(
        config,
        bind=args.bind,
        address=args.address,
        username=args.username,
        password=args.password,
        timeout_seconds=args.timeout,
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
        config.validate()
    except ConfigurationError as exc:
        configure_logging()
        LOGGER.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "start":
        PruxyApp.serve(config)
        return 0

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        print("[printer]")
        print(f"address = {config.printer.address}")
        print(f"username = {config.printer.username}")
        print(f"password = {'********' if config.printer.password else ''}")
        print(f"timeout_seconds = {config.printer.timeout_seconds}")
        print()
        print("[server]")
        print(f"bind = {config.server.bind}")
        print(f"metrics_path = {config.server.metrics_path}")
        print()
        print("[logging]")
        print(f"level = {config.logging.level}")
        print(f"path = {config.logging.path or ''}")
        print(f"log_network = {str(config.logging.log_network).lower()}")
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
