"""Command-line interface for folioshell.

Provides the entry point for running the HTTP server or the interactive
terminal console against a running server.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="folioshell",
        description="Portfolio website with a fake interactive terminal",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/folioshell.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port")

    console_parser = subparsers.add_parser("console", help="Open the terminal against a server")
    console_parser.add_argument(
        "--url", type=str, default=None,
        help="Server base URL (default: console.base_url from config)",
    )
    console_parser.add_argument(
        "--lat", type=float, default=None,
        help="Latitude reported to 'weather -gps'",
    )
    console_parser.add_argument(
        "--lon", type=float, default=None,
        help="Longitude reported to 'weather -gps'",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the folioshell CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from folioshell.config.settings import load_settings
    from folioshell.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    # The full-screen console owns the tty, so it only logs to file
    setup_logging(settings.logging, console=args.command != "console")

    if args.command == "serve":
        logger.info("Starting HTTP server")
        import uvicorn
        from folioshell.server.app import create_app

        app = create_app(settings)
        uvicorn.run(
            app,
            host=args.host or settings.server.host,
            port=args.port or settings.server.port,
        )

    elif args.command == "console":
        from folioshell.shell.console import run_console
        from folioshell.shell.integrations import FixedGeolocation

        geolocation = None
        if args.lat is not None and args.lon is not None:
            geolocation = FixedGeolocation(args.lat, args.lon)
        asyncio.run(run_console(settings, base_url=args.url, geolocation=geolocation))


if __name__ == "__main__":
    main()
