"""Tests for parsing libtest terse listings."""

import pytest

from shard_runner.discovery.libtest.lister import parse_terse_list
from shard_runner.errors import DiscoveryError
from shard_runner.models.binary import TestBinary


@pytest.fixture
def binary() -> TestBinary:
    """A regular test binary."""
    return TestBinary(binary_id="pkg::tests", path="tests", package="pkg")


@pytest.fixture
def bench_binary() -> TestBinary:
    """A benchmark binary."""
    return TestBinary(binary_id="pkg::bench", path="bench", package="pkg", kind="bench")


def test_parses_test_lines(binary: TestBinary) -> None:
    """Keeps test names in output order."""
    output = "tests::b: test\ntests::a: test\n"

    assert parse_terse_list(binary, output) == ["tests::b", "tests::a"]


def test_skips_blank_lines(binary: TestBinary) -> None:
    """Blank lines are ignored."""
    assert parse_terse_list(binary, "\n  \nt: test\n\n") == ["t"]


def test_names_may_contain_colons(binary: TestBinary) -> None:
    """Only the trailing suffix is stripped."""
    assert parse_terse_list(binary, "mod::sub::case: test") == ["mod::sub::case"]


def test_skips_benchmarks_in_test_binaries(binary: TestBinary) -> None:
    """Benchmarks in a non-benchmark binary are not tests."""
    output = "t: test\nb: benchmark\n"

    assert parse_terse_list(binary, output) == ["t"]


def test_keeps_benchmarks_in_bench_binaries(bench_binary: TestBinary) -> None:
    """Benchmark binaries list their benchmarks."""
    output = "t: test\nb: benchmark\n"

    assert parse_terse_list(bench_binary, output) == ["t", "b"]


def test_keeps_duplicates(binary: TestBinary) -> None:
    """Duplicates are reported as-is for the test list to reject."""
    assert parse_terse_list(binary, "a: test\na: test\n") == ["a", "a"]


def test_rejects_unknown_lines(binary: TestBinary) -> None:
    """A line that is not a listing entry fails discovery for the binary."""
    with pytest.raises(DiscoveryError, match="did not end with") as exc_info:
        parse_terse_list(binary, "t: test\n3 tests, 0 benchmarks\n")

    assert exc_info.value.binary_id == "pkg::tests"
