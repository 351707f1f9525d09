"""Models for per-test filter decisions."""

from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

RunIgnored: TypeAlias = Literal["default", "ignored-only", "all"]
MismatchReason: TypeAlias = Literal["partition", "name-filter", "ignored", "not-ignored"]

RUN_IGNORED_CHOICES: tuple[RunIgnored, ...] = ("default", "ignored-only", "all")


@dataclass(frozen=True, kw_only=True)
class Matches:
    """The test should run.

    ``needs_ignored_invocation`` tells the scheduler that the binary must be
    invoked with its ignored-tests flag for this test to execute.
    """

    needs_ignored_invocation: bool

    @property
    def is_match(self) -> bool:
        """Always true for a match."""
        return True

    def to_record(self) -> dict[str, Any]:
        """Render as the tagged FilterMatch record."""
        return {"matches": {"needs_ignored_invocation": self.needs_ignored_invocation}}


@dataclass(frozen=True, kw_only=True)
class Mismatch:
    """The test is skipped, for exactly one reason."""

    reason: MismatchReason

    @property
    def is_match(self) -> bool:
        """Always false for a mismatch."""
        return False

    def to_record(self) -> dict[str, Any]:
        """Render as the tagged FilterMatch record."""
        return {"mismatch": {"reason": self.reason}}


FilterMatch: TypeAlias = Matches | Mismatch


def filter_match_from_record(record: dict[str, Any]) -> FilterMatch:
    """Parse a tagged FilterMatch record produced by ``to_record``."""
    if set(record) == {"matches"}:
        return Matches(
            needs_ignored_invocation=bool(record["matches"]["needs_ignored_invocation"])
        )
    if set(record) == {"mismatch"}:
        reason = record["mismatch"]["reason"]
        if reason not in ("partition", "name-filter", "ignored", "not-ignored"):
            raise ValueError(f"Unknown mismatch reason: {reason!r}")
        return Mismatch(reason=reason)
    raise ValueError(f"Not a filter match record: {record!r}")
