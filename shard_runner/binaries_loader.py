"""Load the list of test binaries to discover from a manifest file."""

import asyncio
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import Field, ValidationError, model_validator

from shard_runner.models.base import Model
from shard_runner.models.binary import TestBinary


class BinaryManifest(Model):
    """Test binaries produced by a build, in discovery order."""

    version: str = Field(..., description="Binary manifest schema version")
    binaries: Sequence[TestBinary] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_binary_ids(self) -> "BinaryManifest":
        seen: set[str] = set()
        for binary in self.binaries:
            if binary.binary_id in seen:
                raise ValueError(f"duplicate binary_id '{binary.binary_id}'")
            seen.add(binary.binary_id)
        return self


async def load_binary_manifest(path: Path) -> BinaryManifest:
    """Load and validate a binary manifest (YAML or JSON).

    Relative binary paths are resolved against the manifest's directory.

    Raises:
        FileNotFoundError: If the manifest does not exist
        ValueError: If the manifest is empty, not valid YAML, or does not
            match the schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Binary manifest not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty binary manifest: {path}")

    try:
        manifest = BinaryManifest.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid binary manifest schema in {path}: {e}") from e

    return manifest.model_copy(
        update={
            "binaries": [
                _resolve_path(binary, path.parent) for binary in manifest.binaries
            ]
        }
    )


def _resolve_path(binary: TestBinary, base: Path) -> TestBinary:
    binary_path = Path(binary.path)
    if binary_path.is_absolute():
        return binary
    return binary.model_copy(update={"path": (base / binary_path).as_posix()})
