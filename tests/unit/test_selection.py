"""Tests for applying a filter to a whole test list."""

import pytest

from shard_runner.filter import TestFilter
from shard_runner.listing import DiscoveryOutcome, TestList
from shard_runner.models.binary import TestBinary
from shard_runner.models.case import NativeTestInfo
from shard_runner.models.match import Matches, Mismatch
from shard_runner.names import SubstringPredicate
from shard_runner.selection import SelectedTest, select_tests


@pytest.fixture
def sample_list() -> TestList:
    """Two binaries, one with an ignored test, plus one failed binary."""
    return TestList.build(
        [
            DiscoveryOutcome(
                binary=TestBinary(binary_id="b1", path="b1", package="pkg"),
                tests=[
                    NativeTestInfo(name="net::connect"),
                    NativeTestInfo(name="net::slow", ignored=True),
                ],
            ),
            DiscoveryOutcome(
                binary=TestBinary(binary_id="b2", path="b2", package="pkg"),
                tests=[NativeTestInfo(name="fs::read")],
            ),
            DiscoveryOutcome(
                binary=TestBinary(binary_id="b3", path="b3", package="pkg"),
                error=RuntimeError("boom"),
            ),
        ]
    )


def test_selects_in_list_order(sample_list: TestList) -> None:
    """One record per listed test, in test list order."""
    selection = select_tests(sample_list, TestFilter(run_ignored="default"))

    assert selection.entries == [
        SelectedTest(
            binary_id="b1",
            test_name="net::connect",
            match=Matches(needs_ignored_invocation=False),
        ),
        SelectedTest(
            binary_id="b1", test_name="net::slow", match=Mismatch(reason="ignored")
        ),
        SelectedTest(
            binary_id="b2",
            test_name="fs::read",
            match=Matches(needs_ignored_invocation=False),
        ),
    ]
    assert selection.run_count == 2
    assert selection.skip_counts == {"ignored": 1}
    assert selection.to_run("b1") == ["net::connect"]


def test_tracks_binaries_needing_ignored(sample_list: TestList) -> None:
    """Binaries with selected ignored tests are reported once."""
    selection = select_tests(sample_list, TestFilter(run_ignored="all"))

    assert selection.binaries_needing_ignored == ["b1"]
    assert selection.run_count == 3


def test_to_dict(sample_list: TestList) -> None:
    """Formats counts and tagged records for JSON output."""
    selection = select_tests(
        sample_list,
        TestFilter(
            run_ignored="default",
            name_predicate=SubstringPredicate(patterns=["net"]),
        ),
    )

    assert selection.to_dict() == {
        "run_count": 1,
        "skip_counts": {"ignored": 1, "name-filter": 1},
        "binaries_needing_ignored": [],
        "tests": {
            "b1": {
                "net::connect": {"matches": {"needs_ignored_invocation": False}},
                "net::slow": {"mismatch": {"reason": "ignored"}},
            },
            "b2": {"fs::read": {"mismatch": {"reason": "name-filter"}}},
        },
    }
