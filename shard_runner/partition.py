"""Deterministic partitioning of a test list across several shards.

Two strategies are supported:

* ``count:M/N`` assigns tests round-robin by their position in the test list,
  counted per binary (or over the whole list with ``scope="global"``).
* ``hash:M/N`` assigns tests by a stable hash of ``(binary_id, test_name)``,
  so independently started shards agree without seeing the same test list.

Shards count up from 1. For any N, every test is claimed by exactly one shard.
"""

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, TypeAlias

from shard_runner.errors import ConfigError
from shard_runner.listing import TestList

PartitionStrategy: TypeAlias = Literal["count", "hash"]
CountScope: TypeAlias = Literal["binary", "global"]


def stable_hash(binary_id: str, test_name: str) -> int:
    """Return a process-independent 64-bit hash of a test's identity.

    The 8-byte BLAKE2b digest, read big-endian, of
    ``binary_id + "\\0" + test_name`` encoded as UTF-8.
    """
    digest = hashlib.blake2b(
        f"{binary_id}\0{test_name}".encode(), digest_size=8
    ).digest()
    return int.from_bytes(digest, "big")


@dataclass(frozen=True, kw_only=True)
class PartitionerBuilder:
    """Partitioning configuration parsed from a ``<strategy>:<shard>/<total>`` spec."""

    strategy: PartitionStrategy
    shard: int
    total_shards: int
    scope: CountScope = "binary"

    def __post_init__(self) -> None:
        expected = f"{self.strategy}:M/N"
        if self.strategy not in ("count", "hash"):
            raise ConfigError(f"unknown partition strategy '{self.strategy}'")
        if self.total_shards < 1:
            raise ConfigError(
                f"total shards must be at least 1, got {self.total_shards}", expected
            )
        if not 1 <= self.shard <= self.total_shards:
            raise ConfigError(
                f"shard {self.shard} must be a number between 1 and total shards "
                f"{self.total_shards}, inclusive",
                expected,
            )
        if self.scope not in ("binary", "global"):
            raise ConfigError(f"unknown count scope '{self.scope}'")

    @classmethod
    def parse(cls, spec: str, *, scope: CountScope = "binary") -> "PartitionerBuilder":
        """Parse a partition spec such as ``hash:2/4`` or ``count:1/3``."""
        strategy, sep, shards = spec.partition(":")
        if not sep or strategy not in ("count", "hash"):
            raise ConfigError(
                f"partition input '{spec}' must begin with \"hash:\" or \"count:\""
            )
        shard, total_shards = _parse_shards(shards, f"{strategy}:M/N")
        return cls(
            strategy=strategy, shard=shard, total_shards=total_shards, scope=scope
        )

    def __str__(self) -> str:
        return f"{self.strategy}:{self.shard}/{self.total_shards}"

    def build(self, test_list: TestList) -> "Partitioner":
        """Create the partitioner for this shard over ``test_list``.

        Hash partitioning ignores the test list. Count partitioning uses it to
        fix each test's ordinal once, up front.
        """
        if self.strategy == "hash":
            return HashPartitioner(shard=self.shard, total_shards=self.total_shards)
        return CountPartitioner(
            shard=self.shard,
            total_shards=self.total_shards,
            ordinals=_ordinals(test_list, self.scope),
        )


def _parse_shards(shards: str, expected_format: str) -> tuple[int, int]:
    shard_str, sep, total_str = shards.partition("/")
    if not sep:
        raise ConfigError(
            f"expected input '{shards}' to be in the format M/N", expected_format
        )
    shard = _parse_count(shard_str, "shard", expected_format)
    total_shards = _parse_count(total_str, "total shards", expected_format)
    return shard, total_shards


def _parse_count(value: str, what: str, expected_format: str) -> int:
    # int() would also accept signs, whitespace and underscores.
    if not (value.isascii() and value.isdigit()):
        raise ConfigError(
            f"failed to parse {what} '{value}' as an integer", expected_format
        )
    return int(value)


def _ordinals(test_list: TestList, scope: CountScope) -> Mapping[tuple[str, str], int]:
    ordinals: dict[tuple[str, str], int] = {}
    global_index = 0
    for suite in test_list.suites:
        for index, test in enumerate(suite.tests):
            ordinals[(suite.binary_id, test.name)] = (
                global_index if scope == "global" else index
            )
            global_index += 1
    return MappingProxyType(ordinals)


@dataclass(frozen=True, kw_only=True)
class Partitioner(ABC):
    """Decides whether a test belongs to this shard. Stateless."""

    shard: int
    total_shards: int

    def classify(self, binary_id: str, test_name: str) -> bool:
        """Return True if the test belongs to this shard."""
        return self.shard_of(binary_id, test_name) == self.shard

    def shard_of(self, binary_id: str, test_name: str) -> int:
        """Return the 1-based shard that owns the test."""
        return self._index(binary_id, test_name) % self.total_shards + 1

    @abstractmethod
    def _index(self, binary_id: str, test_name: str) -> int: ...


@dataclass(frozen=True, kw_only=True)
class HashPartitioner(Partitioner):
    """Partitions by a stable hash of the test identity."""

    def _index(self, binary_id: str, test_name: str) -> int:
        return stable_hash(binary_id, test_name)


@dataclass(frozen=True, kw_only=True)
class CountPartitioner(Partitioner):
    """Partitions round-robin by each test's ordinal in the test list.

    Tests that were not in the test list the partitioner was built from fall
    back to hashing, so they still land in exactly one shard.
    """

    ordinals: Mapping[tuple[str, str], int] = field(repr=False)

    def _index(self, binary_id: str, test_name: str) -> int:
        ordinal = self.ordinals.get((binary_id, test_name))
        if ordinal is None:
            return stable_hash(binary_id, test_name)
        return ordinal
