"""Reporting of per-test filter decisions."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from shard_runner.listing import TestList
from shard_runner.models.case import BinaryError
from shard_runner.models.match import FilterMatch, Matches, MismatchReason
from shard_runner.selection import TestSelection

STATUS_SYMBOLS: Mapping[str, str] = {
    "run": "✓",
    "run-ignored": "✓",
    "partition": "·",
    "name-filter": "·",
    "ignored": "-",
    "not-ignored": "-",
    "error": "!",
}

REASON_LABELS: Mapping[MismatchReason, str] = {
    "partition": "not in this shard",
    "name-filter": "excluded by name filter",
    "ignored": "ignored",
    "not-ignored": "not ignored",
}


def describe_match(match: FilterMatch) -> tuple[str, str]:
    """Return the status key and human label for a decision."""
    if isinstance(match, Matches):
        if match.needs_ignored_invocation:
            return "run-ignored", "run (ignored)"
        return "run", "run"
    return match.reason, f"skip: {REASON_LABELS[match.reason]}"


class Reporter(ABC):
    """Consumes filter decisions to render status."""

    @abstractmethod
    def report_test(self, binary_id: str, test_name: str, match: FilterMatch) -> None:
        """Report the decision for one test."""

    @abstractmethod
    def report_binary_error(self, binary_id: str, error: BinaryError) -> None:
        """Report a binary that could not be listed."""

    @abstractmethod
    def finish(self, test_list: TestList, selection: TestSelection) -> None:
        """Report the end of the selection."""

    def report_selection(self, test_list: TestList, selection: TestSelection) -> None:
        """Report every decision and error, then finish."""
        for binary_id, error in test_list.errors.items():
            self.report_binary_error(binary_id, error)
        for entry in selection.entries:
            self.report_test(entry.binary_id, entry.test_name, entry.match)
        self.finish(test_list, selection)


@dataclass(frozen=True, kw_only=True)
class LogReporter(Reporter):
    """Writes decisions to a logger."""

    log: logging.Logger

    def report_test(self, binary_id: str, test_name: str, match: FilterMatch) -> None:
        """Log the decision at DEBUG for skips and INFO for runs."""
        status, label = describe_match(match)
        level = logging.INFO if match.is_match else logging.DEBUG
        self.log.log(
            level, "%s %s %s: %s", STATUS_SYMBOLS[status], binary_id, test_name, label
        )

    def report_binary_error(self, binary_id: str, error: BinaryError) -> None:
        """Log the error at WARNING."""
        self.log.warning(
            "%s %s: %s (%s)",
            STATUS_SYMBOLS["error"],
            binary_id,
            error.kind,
            error.message,
        )

    def finish(self, test_list: TestList, selection: TestSelection) -> None:
        """Log a summary block."""
        self.log.info("=" * 80)
        self.log.info("Test Selection Summary:")
        self.log.info("=" * 80)
        self.log.info(
            "%d of %d test(s) selected to run across %d binary(ies)",
            selection.run_count,
            test_list.test_count,
            len(test_list),
        )
        for reason, count in sorted(selection.skip_counts.items()):
            self.log.info("  %d skipped: %s", count, REASON_LABELS[reason])
        for binary_id in selection.binaries_needing_ignored:
            self.log.info("  %s needs an ignored-tests invocation", binary_id)
        if test_list.has_errors:
            self.log.warning(
                "%d binary(ies) could not be listed", len(test_list.errors)
            )
