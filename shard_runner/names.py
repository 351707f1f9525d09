"""Name predicates supplied to the test filter by the command line."""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class SubstringPredicate:
    """Accepts a test name matching any of the given patterns.

    A name matches a pattern when it contains it, or equals it when
    ``exact`` is set. With no patterns every name is accepted.
    """

    patterns: Sequence[str] = ()
    exact: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", tuple(self.patterns))

    def __call__(self, test_name: str) -> bool:
        if not self.patterns:
            return True
        if self.exact:
            return test_name in self.patterns
        return any(pattern in test_name for pattern in self.patterns)
