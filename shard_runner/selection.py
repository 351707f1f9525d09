"""Apply a test filter to a whole test list."""

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from shard_runner.filter import TestFilter
from shard_runner.listing import TestList
from shard_runner.models.match import FilterMatch, Matches, Mismatch, MismatchReason


@dataclass(frozen=True, kw_only=True)
class SelectedTest:
    """The filter decision for one test."""

    binary_id: str
    test_name: str
    match: FilterMatch


@dataclass(frozen=True, kw_only=True)
class TestSelection:
    """Filter decisions for every test in a test list, in list order."""

    __test__ = False

    entries: Sequence[SelectedTest]

    @property
    def run_count(self) -> int:
        """Number of tests that will run."""
        return sum(1 for entry in self.entries if entry.match.is_match)

    @property
    def skip_counts(self) -> Mapping[MismatchReason, int]:
        """Number of skipped tests per reason."""
        return Counter(
            entry.match.reason
            for entry in self.entries
            if isinstance(entry.match, Mismatch)
        )

    @property
    def binaries_needing_ignored(self) -> Sequence[str]:
        """Binaries that must be invoked with their ignored-tests flag."""
        binary_ids: dict[str, None] = {}
        for entry in self.entries:
            match = entry.match
            if isinstance(match, Matches) and match.needs_ignored_invocation:
                binary_ids[entry.binary_id] = None
        return list(binary_ids)

    def to_run(self, binary_id: str) -> Sequence[str]:
        """Names of the tests in ``binary_id`` that will run."""
        return [
            entry.test_name
            for entry in self.entries
            if entry.binary_id == binary_id and entry.match.is_match
        ]

    def to_dict(self) -> dict[str, Any]:
        """Format for JSON output."""
        tests: dict[str, dict[str, Any]] = {}
        for entry in self.entries:
            tests.setdefault(entry.binary_id, {})[entry.test_name] = (
                entry.match.to_record()
            )
        return {
            "run_count": self.run_count,
            "skip_counts": dict(sorted(self.skip_counts.items())),
            "binaries_needing_ignored": list(self.binaries_needing_ignored),
            "tests": tests,
        }


def select_tests(test_list: TestList, test_filter: TestFilter) -> TestSelection:
    """Evaluate ``test_filter`` against every test in ``test_list``."""
    return TestSelection(
        entries=[
            SelectedTest(
                binary_id=binary.binary_id,
                test_name=test.name,
                match=test_filter.evaluate(binary.binary_id, test),
            )
            for binary, test in test_list.iter_tests()
        ]
    )
