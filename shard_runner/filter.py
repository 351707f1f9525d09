"""Per-test eligibility: partition, name predicate, then ignored policy."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeAlias

from shard_runner.models.case import NativeTestInfo
from shard_runner.models.match import FilterMatch, Matches, Mismatch, RunIgnored
from shard_runner.partition import Partitioner

NamePredicate: TypeAlias = Callable[[str], bool]


def evaluate(
    binary_id: str,
    test: NativeTestInfo,
    run_ignored: RunIgnored,
    name_predicate: NamePredicate | None = None,
    partitioner: Partitioner | None = None,
) -> FilterMatch:
    """Classify one test, reporting the first rule that excludes it.

    Partition and name selection are checked before the ignored policy, so a
    test outside this shard is never reported as skipped because it is
    ignored.
    """
    if partitioner is not None and not partitioner.classify(binary_id, test.name):
        return Mismatch(reason="partition")
    if name_predicate is not None and not name_predicate(test.name):
        return Mismatch(reason="name-filter")
    if test.ignored and run_ignored == "default":
        return Mismatch(reason="ignored")
    if not test.ignored and run_ignored == "ignored-only":
        return Mismatch(reason="not-ignored")
    return Matches(needs_ignored_invocation=test.ignored)


@dataclass(frozen=True, kw_only=True)
class TestFilter:
    """A run's filter configuration, applied to any number of tests."""

    __test__ = False

    run_ignored: RunIgnored = "default"
    name_predicate: NamePredicate | None = None
    partitioner: Partitioner | None = None

    def evaluate(self, binary_id: str, test: NativeTestInfo) -> FilterMatch:
        """Classify one test against this filter."""
        return evaluate(
            binary_id,
            test,
            self.run_ignored,
            self.name_predicate,
            self.partitioner,
        )
