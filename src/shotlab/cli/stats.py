"""CLI command for inspecting and maintaining the history/stats store.

Usage:
    python -m shotlab.cli.stats [show|reset|recover] [OPTIONS]

Examples:
    # Print lifetime statistics
    python -m shotlab.cli.stats show

    # Zero lifetime statistics (history is kept)
    python -m shotlab.cli.stats reset --yes

    # Fail entries left processing by a crashed run
    python -m shotlab.cli.stats recover
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace
from typing import Optional, Sequence

import structlog

from shotlab.core.config import Settings, configure_logging
from shotlab.core.database import create_engine, init_db, setup_db_session
from shotlab.services.pricing import to_local_currency
from shotlab.uow import create_uow_factory
from shotlab.workers.batch_worker import recover_interrupted_entries

logger = structlog.get_logger()


def parse_args(argv: Optional[Sequence[str]] = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(description="Inspect and maintain generation statistics")

    parser.add_argument(
        "command",
        nargs="?",
        default="show",
        choices=("show", "reset", "recover"),
        help="show (default): print lifetime stats; reset: zero them; "
        "recover: fail interrupted entries",
    )

    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm destructive commands (required for reset)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args(argv)


def print_stats(stats) -> None:
    print("\n" + "=" * 60)
    print("Lifetime Statistics")
    print("=" * 60)
    print(f"Units generated: {stats.total_images_generated}")
    print(f"Input tokens: {stats.total_input_tokens:,}")
    print(f"Output tokens: {stats.total_output_tokens:,}")
    print(f"Total cost: ${stats.total_cost:.4f} ({to_local_currency(stats.total_cost):,} VND)")
    print("\nPer model:")
    for model_id, count in sorted((stats.model_counts or {}).items()):
        print(f"  {model_id}: {count}")
    print("=" * 60 + "\n")


async def async_main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (success), 1 (error)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    if args.command == "reset" and not args.yes:
        print("Error: reset zeroes lifetime statistics; pass --yes to confirm", file=sys.stderr)
        return 1

    engine = create_engine(settings.database_url)
    try:
        await init_db(engine)
        uow_factory = create_uow_factory(setup_db_session(engine))

        if args.command == "recover":
            count = await recover_interrupted_entries(uow_factory)
            print(f"Interrupted entries marked failed: {count}")
            return 0

        async with await uow_factory() as uow:
            if args.command == "reset":
                stats = await uow.stats.reset()
                logger.info("cli.stats_reset")
            else:
                stats = await uow.stats.get()

        print_stats(stats)
        return 0

    except KeyboardInterrupt:
        logger.info("cli.interrupted")
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        logger.error(
            "cli.unexpected_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        return 1

    finally:
        await engine.dispose()


def main() -> None:
    """Synchronous entry point for CLI."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
