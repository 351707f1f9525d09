"""Configuration for the libtest lister."""

from collections.abc import Mapping

from pydantic import BaseModel, Field


class LibtestListerConfig(BaseModel):
    """Configuration for the libtest lister."""

    timeout: float = Field(default=60.0, gt=0, description="Seconds per listing call")
    extra_env: Mapping[str, str] = Field(default_factory=dict)
    # Run binaries through a wrapper such as "wine" or "qemu-aarch64"
    runner: list[str] = Field(default_factory=list)
