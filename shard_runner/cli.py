"""CLI entry point for listing and sharding compiled test binaries."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from shard_runner.binaries_loader import load_binary_manifest
from shard_runner.builder import DEFAULT_CONCURRENCY, build_test_list
from shard_runner.discovery.loading import load_lister_manifest
from shard_runner.errors import ConfigError
from shard_runner.filter import TestFilter
from shard_runner.listing import TestList
from shard_runner.models.match import RUN_IGNORED_CHOICES, RunIgnored
from shard_runner.names import SubstringPredicate
from shard_runner.partition import PartitionerBuilder
from shard_runner.reporter import LogReporter
from shard_runner.selection import TestSelection, select_tests

EXIT_OK = 0
EXIT_BINARY_ERRORS = 1
EXIT_CONFIG_ERROR = 2


def format_output(test_list: TestList, selection: TestSelection) -> dict[str, Any]:
    """Format the test list and selection for JSON output."""
    return {
        "test_list": test_list.to_document().model_dump(mode="json"),
        "selection": selection.to_dict(),
    }


async def run(
    binaries_path: Path,
    partition: str | None = None,
    run_ignored: RunIgnored = "default",
    filters: Sequence[str] = (),
    exact: bool = False,
    lister_key: str = "libtest",
    lister_config_json: str = "{}",
    concurrency: int = DEFAULT_CONCURRENCY,
) -> int:
    """List, partition and filter tests, print the result and return exit code."""
    log = logging.getLogger("shard_runner")

    try:
        partitioner_builder = (
            PartitionerBuilder.parse(partition) if partition is not None else None
        )
    except ConfigError as e:
        log.error("Invalid partition: %s", e)
        return EXIT_CONFIG_ERROR

    log.info("Loading binary manifest: %s", binaries_path)
    manifest = await load_binary_manifest(binaries_path)

    log.info("Loading lister: %s", lister_key)
    lister_manifest = load_lister_manifest(lister_key)
    lister_config = lister_manifest.config_cls(**json.loads(lister_config_json))

    async with lister_manifest.lister_factory(lister_config) as lister:
        test_list = await build_test_list(manifest.binaries, lister, concurrency)

    partitioner = None
    if partitioner_builder is not None:
        log.info("Partitioning with %s", partitioner_builder)
        partitioner = partitioner_builder.build(test_list)

    test_filter = TestFilter(
        run_ignored=run_ignored,
        name_predicate=SubstringPredicate(patterns=filters, exact=exact)
        if filters
        else None,
        partitioner=partitioner,
    )
    selection = select_tests(test_list, test_filter)

    LogReporter(log=log).report_selection(test_list, selection)

    print(json.dumps(format_output(test_list, selection), indent=2))

    return EXIT_BINARY_ERRORS if test_list.has_errors else EXIT_OK


def positive_int(value: str) -> int:
    """Argparse type for options that need an integer of at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="List tests in compiled test binaries and select a shard"
    )
    parser.add_argument(
        "--binaries",
        type=Path,
        required=True,
        help="Path to the YAML or JSON manifest of test binaries",
    )
    parser.add_argument(
        "--partition",
        default=None,
        help='Shard to select, as "count:M/N" or "hash:M/N"',
    )
    parser.add_argument(
        "--run-ignored",
        choices=RUN_IGNORED_CHOICES,
        default="default",
        help="Which tests to run with respect to their ignored flag",
    )
    parser.add_argument(
        "--filter",
        dest="filters",
        action="append",
        default=[],
        help="Run only tests whose name contains this string (repeatable)",
    )
    parser.add_argument(
        "--exact",
        action="store_true",
        help="Match --filter strings against full test names exactly",
    )
    parser.add_argument(
        "--lister",
        default="libtest",
        help="Lister key (libtest)",
    )
    parser.add_argument(
        "--lister-config",
        default="{}",
        help="JSON configuration for the lister",
    )
    parser.add_argument(
        "--concurrency",
        type=positive_int,
        default=DEFAULT_CONCURRENCY,
        help="Maximum number of binaries listed at once",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every per-test decision",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            binaries_path=args.binaries,
            partition=args.partition,
            run_ignored=args.run_ignored,
            filters=args.filters,
            exact=args.exact,
            lister_key=args.lister,
            lister_config_json=args.lister_config,
            concurrency=args.concurrency,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
