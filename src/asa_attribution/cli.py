"""Command-line interface for asa-attribution.

Runs the attribution pipeline from the terminal with a token obtained
elsewhere (the platform token call only exists on-device).

Usage:
    asa-attribution fetch --token-file token.txt
    asa-attribution fetch --token "$TOKEN" --format json --retries 2
    asa-attribution show
    asa-attribution clear
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from asa_attribution import __version__
from asa_attribution.cache import FileStore, PayloadCache
from asa_attribution.config import settings
from asa_attribution.errors import NotFound
from asa_attribution.payload import AttributionPayload, as_analytics_dict
from asa_attribution.pipeline import AttributionOrchestrator
from asa_attribution.token_provider import TokenProvider

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="asa-attribution",
        description="Apple Search Ads install attribution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  asa-attribution fetch --token-file token.txt
  asa-attribution fetch --token "$TOKEN" --format json --retries 2
  asa-attribution show
  asa-attribution clear
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # fetch command
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch the attribution record for a token",
        description="Exchange a token for its attribution record and update the cache",
    )
    token_group = fetch_parser.add_mutually_exclusive_group(required=True)
    token_group.add_argument(
        "--token",
        type=str,
        help="Attribution token",
    )
    token_group.add_argument(
        "--token-file",
        type=Path,
        help="File containing the attribution token",
    )
    fetch_parser.add_argument(
        "--retries",
        type=int,
        choices=range(0, NotFound.max_attempts),
        default=0,
        help=(
            "Extra attempts when no record is found yet "
            f"(waits {NotFound.retry_interval:g}s between attempts, default: 0)"
        ),
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the cached attribution record",
    )

    # clear command
    clear_parser = subparsers.add_parser(
        "clear",
        help="Remove the cached attribution record",
    )

    for sub in (fetch_parser, show_parser, clear_parser):
        sub.add_argument(
            "--cache-dir",
            type=Path,
            default=Path(settings.cache_dir),
            help=f"Directory for the payload cache (default: ./{settings.cache_dir})",
        )

    for sub in (fetch_parser, show_parser):
        sub.add_argument(
            "--format",
            type=str,
            choices=["text", "json"],
            default="text",
            help="Output format (default: text)",
        )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop.
    """
    def _target():
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    future = _executor.submit(_target)
    return future.result()


def _make_cache(cache_dir: Path) -> PayloadCache:
    return PayloadCache(FileStore(base_path=cache_dir), key=settings.cache_key)


def _format_payload(payload: AttributionPayload, fmt: str) -> str:
    data = as_analytics_dict(payload, prefix=settings.analytics_prefix)
    if fmt == "json":
        return json.dumps(data, indent=2)
    return "\n".join(f"{key}: {value}" for key, value in data.items())


async def _fetch_with_retries(
    token_provider: TokenProvider,
    cache: PayloadCache,
    retries: int,
) -> AttributionOrchestrator:
    """Run the pipeline, starting a fresh run after each NotFound."""
    attempt = 0
    while True:
        orchestrator = AttributionOrchestrator(
            lambda p: logger.info("Attribution payload loaded: %r", p),
            lambda p: logger.info("New attribution payload: %r", p),
            token_provider=token_provider,
            cache=cache,
        )
        await orchestrator.wait()

        if isinstance(orchestrator.error, NotFound) and attempt < retries:
            attempt += 1
            logger.warning(
                "No record found yet, retrying in %.0fs (attempt %d/%d)",
                NotFound.retry_interval, attempt + 1, retries + 1,
            )
            await asyncio.sleep(NotFound.retry_interval)
            continue

        return orchestrator


def cmd_fetch(args: argparse.Namespace) -> int:
    """Execute the fetch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        if args.token_file is not None:
            token = args.token_file.read_text(encoding="utf-8").strip()
        else:
            token = args.token.strip()

        token_provider = TokenProvider(lambda: token)
        try:
            orchestrator = _run_async(
                _fetch_with_retries(token_provider, _make_cache(args.cache_dir), args.retries)
            )
        finally:
            token_provider.shutdown()

        if orchestrator.error is not None:
            print(f"Error: {orchestrator.error}", file=sys.stderr)
            return 1

        payload = orchestrator.attribution_payload
        if payload is None:
            print("No attribution record for this install")
            return 0

        print(_format_payload(payload, args.format))
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("Fetch failed: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_show(args: argparse.Namespace) -> int:
    """Execute the show command."""
    payload = _run_async(_make_cache(args.cache_dir).load())
    if payload is None:
        print("No cached attribution record", file=sys.stderr)
        return 1

    print(_format_payload(payload, args.format))
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    """Execute the clear command."""
    _run_async(_make_cache(args.cache_dir).clear())
    print("Cleared cached attribution record")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    print(f"asa-attribution v{__version__}")
    print("Apple Search Ads install attribution")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    # Route to command handler
    if args.command == "fetch":
        return cmd_fetch(args)
    elif args.command == "show":
        return cmd_show(args)
    elif args.command == "clear":
        return cmd_clear(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        # No command specified
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
