"""Entry point of the src package. Allows python -m src."""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path

from src.catalog import CatalogAggregator, CatalogFileError, load_provider_catalogs
from src.catalog.aggregator import DEFAULT_OUTPUT_FILENAME
from src.catalog.utils import setup_logger
from src.settings import settings

logger = logging.getLogger("src")


# =============================================================================
# COMMAND HANDLERS
# =============================================================================


def run_aggregate(args: argparse.Namespace) -> None:
    """Aggregate a provider snapshot and export the catalog."""
    setup_logger("src", args.log_level or settings.log_level, settings.logging.log_dir)

    input_path = args.input or settings.paths.default_snapshot_path
    logger.info("Loading provider catalogs from %s", input_path)
    catalogs = load_provider_catalogs(input_path)
    aggregator = CatalogAggregator(settings.rating.to_config())
    catalog = aggregator.aggregate(catalogs)

    output = args.output or settings.paths.processed_dir / DEFAULT_OUTPUT_FILENAME
    path = aggregator.export_json(catalog, output, include_stats=not args.no_stats)

    logger.info("Aggregated %d providers into %s", len(catalogs), path)
    print(f"{len(catalog)} series from {len(catalogs)} providers -> {path}")


def show_config(_: argparse.Namespace) -> None:
    """Print the effective rating configuration."""
    print(json.dumps(settings.rating.to_config().model_dump(), indent=2))


# =============================================================================
# ARGUMENT PARSING
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Series catalog aggregator - multi-provider dedup and rating",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src aggregate
  python -m src aggregate --input data/raw/snapshot.json
  python -m src aggregate --input snapshot.json --output out.json --no-stats
  python -m src show-config
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    aggregate_parser = subparsers.add_parser("aggregate", help="Aggregate provider catalogs")
    aggregate_parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help=f"Snapshot JSON (default: {settings.paths.default_snapshot_path})",
    )
    aggregate_parser.add_argument("--output", type=Path, default=None, help="Output JSON")
    aggregate_parser.add_argument(
        "--no-stats", action="store_true", help="Omit run statistics from output"
    )
    aggregate_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help=f"Log level (default: {settings.log_level})",
    )
    aggregate_parser.set_defaults(handler=run_aggregate)

    config_parser = subparsers.add_parser("show-config", help="Print rating configuration")
    config_parser.set_defaults(handler=show_config)

    return parser


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except CatalogFileError as e:
        logger.error("Cannot load catalogs: %s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"\nFATAL ERROR: {e}", file=sys.stderr)
        traceback.print_exc()
        logger.error("Aggregation failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
