"""Models describing compiled test binaries."""

from pathlib import PurePath
from typing import Literal, TypeAlias

from pydantic import Field, field_validator

from shard_runner.models.base import Model

BinaryKind: TypeAlias = Literal[
    "lib", "bin", "test", "bench", "example", "proc-macro", "doc"
]


class TestBinInfo(Model):
    """Per-binary metadata gathered at build and discovery time."""

    __test__ = False

    test_count: int = Field(default=0, ge=0, description="Number of discovered tests")
    supports_ignored_filter: bool = Field(
        default=True,
        description="Whether the binary accepts an --ignored listing/run flag",
    )
    supports_json_output: bool = Field(
        default=False, description="Whether the binary can emit JSON test events"
    )
    build_config: str = Field(
        default="debug", description="Build profile used to produce the binary"
    )


class TestBinary(Model):
    """A single compiled test artifact."""

    __test__ = False

    binary_id: str = Field(..., min_length=1, description="Logical binary identity")
    path: str = Field(..., min_length=1, description="Path to the executable")
    package: str = Field(..., description="Package the binary belongs to")
    kind: BinaryKind = Field(default="test", description="Build target kind")
    platform: str = Field(default="host", description="Target triple or 'host'")
    info: TestBinInfo = Field(default_factory=TestBinInfo)

    @field_validator("path", mode="before")
    @classmethod
    def _portable_path(cls, value: object) -> object:
        if isinstance(value, PurePath):
            value = value.as_posix()
        if isinstance(value, str):
            try:
                value.encode("utf-8")
            except UnicodeEncodeError as e:
                raise ValueError(f"path is not valid UTF-8: {value!r}") from e
        return value

    @property
    def is_benchmark(self) -> bool:
        """Whether this binary is a benchmark target."""
        return self.kind == "bench"

    @property
    def is_doc_test(self) -> bool:
        """Whether this binary runs documentation tests."""
        return self.kind == "doc"

    def with_test_count(self, test_count: int) -> "TestBinary":
        """Return a copy with ``info.test_count`` set."""
        info = self.info.model_copy(update={"test_count": test_count})
        return self.model_copy(update={"info": info})
