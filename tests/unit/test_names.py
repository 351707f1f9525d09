"""Tests for substring name predicates."""

import pytest

from shard_runner.names import SubstringPredicate


def test_no_patterns_accepts_everything() -> None:
    """An empty predicate matches any name."""
    assert SubstringPredicate()("anything::at_all")


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("parser::test_tokens", True),
        ("net::test_connect", True),
        ("fs::test_read", False),
    ],
)
def test_any_pattern_matches(name: str, expected: bool) -> None:
    """A name is accepted when it contains any of the patterns."""
    predicate = SubstringPredicate(patterns=["parser", "connect"])

    assert predicate(name) is expected


def test_exact_requires_full_name() -> None:
    """Exact mode compares whole names."""
    predicate = SubstringPredicate(patterns=["tests::a"], exact=True)

    assert predicate("tests::a")
    assert not predicate("tests::ab")


def test_patterns_are_frozen() -> None:
    """Patterns are copied so later mutation has no effect."""
    patterns = ["a"]
    predicate = SubstringPredicate(patterns=patterns)
    patterns.append("b")

    assert not predicate("b")
