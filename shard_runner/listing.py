"""The immutable inventory of test binaries and the tests they contain."""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import ConfigDict, Field, RootModel

from shard_runner.errors import NameCollisionError
from shard_runner.models.base import Model
from shard_runner.models.binary import TestBinary
from shard_runner.models.case import BinaryError, NativeTestInfo

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DiscoveryOutcome:
    """What discovery produced for one binary: its tests or the failure."""

    binary: TestBinary
    tests: Sequence[NativeTestInfo] = ()
    error: BaseException | None = None


@dataclass(frozen=True, kw_only=True)
class TestSuite:
    """One binary's entry in the test list."""

    __test__ = False

    binary: TestBinary
    tests: tuple[NativeTestInfo, ...] = ()
    error: BinaryError | None = None

    @property
    def binary_id(self) -> str:
        """Identity of the binary."""
        return self.binary.binary_id


class TestCaseDocument(Model):
    """Serialized attributes of one test."""

    __test__ = False

    ignored: bool
    tags: tuple[str, ...] = ()


class SuiteDocument(Model):
    """Serialized entry for one binary."""

    binary_info: TestBinary
    tests: dict[str, TestCaseDocument] = Field(default_factory=dict)
    error: BinaryError | None = None


class TestListDocument(RootModel[dict[str, SuiteDocument]]):
    """Machine-readable test list keyed by binary identity."""

    __test__ = False

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class TestList:
    """Ordered, read-only collection of test suites keyed by binary identity.

    Build it with :meth:`build` from discovery outcomes. Binaries whose
    discovery failed, or whose report repeats a test name, are kept with a
    recorded :class:`BinaryError` and no tests so that consumers of the
    serialized document can tell the run was incomplete.
    """

    __test__ = False

    _suites: Mapping[str, TestSuite] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_suites", MappingProxyType(dict(self._suites)))

    @classmethod
    def build(cls, discovered: Iterable[DiscoveryOutcome]) -> "TestList":
        """Build a test list from per-binary discovery outcomes."""
        suites: dict[str, TestSuite] = {}
        for outcome in discovered:
            binary_id = outcome.binary.binary_id
            if binary_id in suites:
                raise ValueError(f"Binary '{binary_id}' discovered more than once")
            suites[binary_id] = _build_suite(outcome)
        return cls(suites)

    @property
    def suites(self) -> Sequence[TestSuite]:
        """All suites in insertion order, including errored ones."""
        return tuple(self._suites.values())

    def get(self, binary_id: str) -> TestSuite | None:
        """Return the suite for a binary, if present."""
        return self._suites.get(binary_id)

    def __len__(self) -> int:
        return len(self._suites)

    def __contains__(self, binary_id: object) -> bool:
        return binary_id in self._suites

    def iter_tests(self) -> Iterator[tuple[TestBinary, NativeTestInfo]]:
        """Yield every (binary, test) pair in stable order."""
        for suite in self._suites.values():
            for test in suite.tests:
                yield suite.binary, test

    @property
    def test_count(self) -> int:
        """Total number of tests across all binaries."""
        return sum(len(suite.tests) for suite in self._suites.values())

    @property
    def errors(self) -> Mapping[str, BinaryError]:
        """Recorded errors keyed by binary identity."""
        return {
            binary_id: suite.error
            for binary_id, suite in self._suites.items()
            if suite.error is not None
        }

    @property
    def has_errors(self) -> bool:
        """Whether any binary failed to list."""
        return any(suite.error is not None for suite in self._suites.values())

    def to_document(self) -> TestListDocument:
        """Convert to the serializable document."""
        return TestListDocument(
            {
                binary_id: SuiteDocument(
                    binary_info=suite.binary,
                    tests={
                        test.name: TestCaseDocument(
                            ignored=test.ignored, tags=test.tags
                        )
                        for test in suite.tests
                    },
                    error=suite.error,
                )
                for binary_id, suite in self._suites.items()
            }
        )

    @classmethod
    def from_document(cls, document: TestListDocument) -> "TestList":
        """Rebuild a test list from its serialized document."""
        suites: dict[str, TestSuite] = {}
        for binary_id, suite_doc in document.root.items():
            if suite_doc.binary_info.binary_id != binary_id:
                raise ValueError(
                    f"Document key '{binary_id}' does not match binary_id "
                    f"'{suite_doc.binary_info.binary_id}'"
                )
            suites[binary_id] = TestSuite(
                binary=suite_doc.binary_info,
                tests=tuple(
                    NativeTestInfo(name=name, ignored=case.ignored, tags=case.tags)
                    for name, case in suite_doc.tests.items()
                ),
                error=suite_doc.error,
            )
        return cls(suites)

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialize to JSON."""
        return self.to_document().model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "TestList":
        """Deserialize from JSON produced by :meth:`to_json`."""
        return cls.from_document(TestListDocument.model_validate_json(data))


def _build_suite(outcome: DiscoveryOutcome) -> TestSuite:
    """Validate one binary's discovery outcome into a suite."""
    binary = outcome.binary
    if outcome.error is not None:
        log.warning("Excluding %s: %s", binary.binary_id, outcome.error)
        return TestSuite(
            binary=binary.with_test_count(0),
            error=BinaryError(kind="discovery", message=str(outcome.error)),
        )

    try:
        tests = _unique_tests(binary.binary_id, outcome.tests)
    except NameCollisionError as e:
        log.warning("Excluding %s: %s", binary.binary_id, e)
        return TestSuite(
            binary=binary.with_test_count(0),
            error=BinaryError(kind="name-collision", message=str(e)),
        )

    return TestSuite(binary=binary.with_test_count(len(tests)), tests=tests)


def _unique_tests(
    binary_id: str, tests: Sequence[NativeTestInfo]
) -> tuple[NativeTestInfo, ...]:
    """Return tests in reported order, rejecting duplicate names."""
    seen: set[str] = set()
    for test in tests:
        if test.name in seen:
            raise NameCollisionError(binary_id, test.name)
        seen.add(test.name)
    return tuple(tests)
