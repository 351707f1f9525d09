"""Abstract base class for test listers."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from shard_runner.models.binary import TestBinary
from shard_runner.models.case import NativeTestInfo


@dataclass(frozen=True, kw_only=True)
class BinaryLister(ABC):
    """Lists the tests a compiled binary contains without running them.

    Implementations own any per-call timeout. Calls for different binaries
    may run concurrently and must not share mutable state.
    """

    @abstractmethod
    async def list_tests(self, binary: TestBinary) -> Sequence[NativeTestInfo]:
        """Return the binary's self-reported tests in reported order.

        Args:
            binary: The binary to list

        Returns:
            One entry per reported test, duplicates included

        Raises:
            DiscoveryError: If the binary cannot be invoked or its output
                cannot be parsed

        """
