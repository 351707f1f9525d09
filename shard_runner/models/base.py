"""Base model shared by every serialized shard runner structure."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen model that rejects unknown fields.

    Documents produced by one shard are read back by others, so a misspelled
    field must fail loudly instead of being dropped.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
