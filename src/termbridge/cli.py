"""Command-line interface for termbridge.

Provides the main entry point for connecting a console terminal to a
backend, starting the reference endpoint server, or checking that an
endpoint is up.
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
        prog="termbridge",
        description="Interactive remote-terminal session bridge",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termbridge.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    connect_parser = subparsers.add_parser("connect", help="Open a console terminal on a backend")
    connect_parser.add_argument(
        "--url", type=str, default=None,
        help="Base URL of the backend; https:// selects wss:// (default: client.base_url)",
    )
    connect_parser.add_argument(
        "--session-id", type=str, default=None,
        help="Session identifier (default: random)",
    )

    endpoint_parser = subparsers.add_parser("endpoint", help="Start the reference endpoint server")
    endpoint_parser.add_argument("--host", type=str, default=None)
    endpoint_parser.add_argument("--port", type=int, default=None)

    status_parser = subparsers.add_parser("status", help="Check an endpoint's /health route")
    status_parser.add_argument("--url", type=str, default=None)

    return parser.parse_args(argv)


async def _connect(settings, args) -> None:
    """Run one console terminal until EOF or remote close."""
    from termbridge.console import ConsoleTerminal
    from termbridge.session.registry import SessionRegistry

    registry = SessionRegistry(
        base_url=args.url or settings.client.base_url,
        path=settings.client.endpoint_path,
    )
    console = ConsoleTerminal(registry, session_id=args.session_id)
    try:
        await console.run()
    finally:
        await registry.close_all()


async def _status(settings, args) -> int:
    """Query the endpoint's health route."""
    import httpx

    base_url = (args.url or settings.client.base_url).rstrip("/")
    try:
        async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
            resp = await client.get("/health")
            resp.raise_for_status()
    except httpx.HTTPError as e:
        print(f"Endpoint {base_url} unavailable: {e}")
        return 1
    data = resp.json()
    print(f"Endpoint {base_url}: {data.get('status')} ({data.get('active_sessions', 0)} active sessions)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the termbridge CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 0

    from termbridge.config.settings import load_settings
    from termbridge.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "connect":
        logger.info("Connecting console terminal")
        try:
            asyncio.run(_connect(settings, args))
        except KeyboardInterrupt:
            pass

    elif args.command == "endpoint":
        logger.info("Starting endpoint server")
        from termbridge.endpoint.server import create_app_from_config
        import uvicorn
        ep = settings.endpoint
        uvicorn.run(
            create_app_from_config(ep),
            host=args.host or ep.host,
            port=args.port or ep.port,
        )

    elif args.command == "status":
        return asyncio.run(_status(settings, args))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
