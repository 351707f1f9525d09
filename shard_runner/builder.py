"""Concurrent discovery of test binaries into a test list."""

import asyncio
import logging
from collections.abc import Sequence

from shard_runner.discovery.base import BinaryLister
from shard_runner.errors import DiscoveryError
from shard_runner.listing import DiscoveryOutcome, TestList
from shard_runner.models.binary import TestBinary

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 8


async def build_test_list(
    binaries: Sequence[TestBinary],
    lister: BinaryLister,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> TestList:
    """List every binary, at most ``concurrency`` at a time.

    A binary that fails to list is recorded with its error and the others
    carry on. Cancelling the caller cancels in-flight listings and propagates;
    no partially built test list is returned.

    Args:
        binaries: Binaries to list, in the order the test list should keep
        lister: Discovery capability, owner of any per-call timeout
        concurrency: Maximum number of simultaneous listings

    Returns:
        The test list, with one suite per input binary

    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    if not binaries:
        log.info("No test binaries provided")
        return TestList()

    log.info(
        "Listing %d binary(ies) with concurrency %d...", len(binaries), concurrency
    )
    semaphore = asyncio.Semaphore(concurrency)
    tasks = [_list_binary(binary, lister, semaphore) for binary in binaries]

    results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes = [
        _to_outcome(binary, result)
        for binary, result in zip(binaries, results, strict=True)
    ]
    test_list = TestList.build(outcomes)
    log.info(
        "Listed %d test(s) across %d binary(ies), %d with errors",
        test_list.test_count,
        len(test_list),
        len(test_list.errors),
    )
    return test_list


async def _list_binary(
    binary: TestBinary,
    lister: BinaryLister,
    semaphore: asyncio.Semaphore,
) -> DiscoveryOutcome:
    async with semaphore:
        log.debug("Listing %s (%s)", binary.binary_id, binary.path)
        tests = await lister.list_tests(binary)
    return DiscoveryOutcome(binary=binary, tests=tests)


def _to_outcome(
    binary: TestBinary, result: DiscoveryOutcome | BaseException
) -> DiscoveryOutcome:
    if isinstance(result, DiscoveryOutcome):
        return result
    if isinstance(result, asyncio.CancelledError):
        # A single listing was cancelled from inside; the run itself was not.
        return DiscoveryOutcome(
            binary=binary,
            error=DiscoveryError(binary.binary_id, "listing was cancelled"),
        )
    if not isinstance(result, Exception):
        raise result
    if not isinstance(result, DiscoveryError):
        log.error(
            "Unexpected error listing %s: %s", binary.binary_id, result, exc_info=result
        )
        result = DiscoveryError(binary.binary_id, str(result))
    return DiscoveryOutcome(binary=binary, error=result)
