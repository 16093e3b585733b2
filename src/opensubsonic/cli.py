"""
opensubsonic CLI - Command Line Interface

Connection settings come from the environment (SUBSONIC_URL, SUBSONIC_USER,
SUBSONIC_PASSWORD, ...); see ClientSettings.from_environment.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from . import __version__
from .client import SubsonicClient
from .config import ClientSettings
from .exceptions import OpenSubsonicError
from .logger import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="python -m opensubsonic",
        description="Query a Subsonic/OpenSubsonic server",
        epilog="Example: SUBSONIC_URL=https://music.example.com python -m opensubsonic ping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser("ping", help="Check connectivity and credentials")
    subparsers.add_parser("license", help="Show the server license")

    stream = subparsers.add_parser("stream-url", help="Print a streaming URL for a song")
    stream.add_argument("id", help="Song or video id")
    stream.add_argument(
        "--max-bit-rate",
        type=int,
        metavar="KBPS",
        help="Maximum bit rate for transcoding",
    )
    stream.add_argument(
        "--format",
        metavar="FORMAT",
        help='Target format, or "raw" to disable transcoding',
    )

    cover = subparsers.add_parser("cover-art-url", help="Print a cover art URL")
    cover.add_argument("id", help="Cover art id")
    cover.add_argument("--size", type=int, metavar="PX", help="Scale the image to this size")

    return parser


async def run_command(args: argparse.Namespace, client: SubsonicClient) -> None:
    """Run one subcommand and print its result."""
    if args.command == "ping":
        envelope = await client.ping()
        server = " ".join(filter(None, [envelope.server_type, envelope.server_version]))
        print(f"OK: API {envelope.version}" + (f" ({server})" if server else ""))
    elif args.command == "license":
        license_info = await client.get_license()
        print(f"Valid: {license_info.valid}")
        if license_info.email:
            print(f"Email: {license_info.email}")
        if license_info.license_expires:
            print(f"Expires: {license_info.license_expires}")
    elif args.command == "stream-url":
        print(client.stream_url(args.id, max_bit_rate=args.max_bit_rate, format=args.format))
    elif args.command == "cover-art-url":
        print(client.cover_art_url(args.id, size=args.size))


async def async_main(args: argparse.Namespace) -> int:
    """
    Async main function.

    Args:
        args: Parsed CLI arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        settings = ClientSettings.from_environment()
        async with SubsonicClient(settings.to_client_config(), timeout=settings.timeout) as client:
            await run_command(args, client)
        return 0
    except OpenSubsonicError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            logger.exception("Detailed error traceback:")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        print("Cancelled by user", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
