#!/usr/bin/env python3
"""
configwatch - Main Entry Point

Loads settings, then polls the AI config provider and serves the latest
configuration over HTTP.

Usage:
    configwatch                       # Use config.yaml / environment
    configwatch --config my.yaml      # Use custom config file
    configwatch --static              # Serve the default config, no provider
    configwatch --dry-run             # Print settings and exit
"""

import argparse
import asyncio
import sys

from configwatch.common.exceptions import ConfigWatchError
from configwatch.common.logging_setup import get_service_logger, set_service_log_level
from configwatch.common.settings import Settings, load_settings
from configwatch.service import ConfigWatchService
from configwatch.services.config import StaticConfigProvider

logger = get_service_logger("main")


def print_settings_summary(settings: Settings, static: bool = False) -> None:
    """Print a summary of the effective settings"""
    print("\n" + "=" * 60)
    print("  CONFIGWATCH")
    print("=" * 60)

    if static:
        print("\n  Provider: static (default config)")
    else:
        print(f"\n  Provider: {settings.base_url}")
        print(f"    - Client-side ID: {'set' if settings.client_side_id else 'MISSING'}")
        print(f"    - Config key: {settings.config_key}")
        print(f"    - Context key: {settings.context_key}")
        print(f"    - Log level flag: {settings.log_level_flag or 'disabled'}")

    print(f"\n  Refresh: every {settings.refresh_interval_s}s "
          f"(timeout {settings.fetch_timeout_s}s)")
    print(f"  Server: http://{settings.host}:{settings.port}")
    print(f"  Admin: http://127.0.0.1:{settings.admin_port} (health, sync)")
    print("=" * 60 + "\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="configwatch",
        description="Poll an AI config and serve the latest version over HTTP",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file (default: /etc/configwatch/config.yaml or ./config.yaml)",
    )
    parser.add_argument(
        "--static",
        action="store_true",
        help="Serve the default config without contacting a provider",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print settings and exit without starting",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_service_log_level("DEBUG")

    try:
        settings = load_settings(args.config)
    except ConfigWatchError as e:
        logger.error(f"Failed to load settings: {e.message}")
        return 1

    print_settings_summary(settings, static=args.static)

    if args.dry_run:
        print("Dry run mode - exiting without starting")
        return 0

    try:
        provider = StaticConfigProvider() if args.static else None
        service = ConfigWatchService(settings, provider=provider)
    except ConfigWatchError as e:
        logger.error(f"Startup failed: {e.message}")
        return 1

    try:
        asyncio.run(service.serve())
    except ConfigWatchError as e:
        logger.error(f"Service failed: {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\nStopped by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
