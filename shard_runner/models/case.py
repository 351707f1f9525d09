"""Models for individual tests and per-binary listing errors."""

from typing import Literal, TypeAlias

from pydantic import Field, field_validator

from shard_runner.models.base import Model

BinaryErrorKind: TypeAlias = Literal["discovery", "name-collision"]


class NativeTestInfo(Model):
    """A test as reported by its binary's own listing."""

    __test__ = False

    name: str = Field(..., min_length=1, description="Fully qualified test name")
    ignored: bool = Field(default=False, description="Excluded from default runs")
    tags: tuple[str, ...] = Field(
        default=(), description="Required-capability tags declared by the test"
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _ordered_tags(cls, value: object) -> object:
        # Sets have no stable order; serialized documents must.
        if isinstance(value, (set, frozenset)):
            return tuple(sorted(value))
        return value


class BinaryError(Model):
    """Why a binary is missing from the test list."""

    kind: BinaryErrorKind
    message: str
