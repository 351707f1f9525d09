"""Tests for filter match records."""

import pytest

from shard_runner.models.match import Matches, Mismatch, filter_match_from_record


def test_matches_record() -> None:
    """A match renders as a tagged record."""
    assert Matches(needs_ignored_invocation=True).to_record() == {
        "matches": {"needs_ignored_invocation": True}
    }


def test_mismatch_record() -> None:
    """A mismatch renders its reason."""
    assert Mismatch(reason="not-ignored").to_record() == {
        "mismatch": {"reason": "not-ignored"}
    }


def test_parses_records() -> None:
    """Records parse back into decisions."""
    assert filter_match_from_record(
        {"matches": {"needs_ignored_invocation": False}}
    ) == Matches(needs_ignored_invocation=False)
    assert filter_match_from_record(
        {"mismatch": {"reason": "partition"}}
    ) == Mismatch(reason="partition")


@pytest.mark.parametrize(
    "record",
    [
        {},
        {"mismatch": {"reason": "flaky"}},
        {"matches": {"needs_ignored_invocation": True}, "mismatch": {}},
    ],
)
def test_rejects_invalid_records(record: dict) -> None:
    """Unknown tags and reasons are rejected."""
    with pytest.raises(ValueError):
        filter_match_from_record(record)
