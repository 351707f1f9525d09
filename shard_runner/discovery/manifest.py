"""What a lister plugin exposes through its entry point."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from shard_runner.discovery.base import BinaryLister

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class ListerManifest(Generic[ConfigT]):
    """Pairs a lister's config model with the factory that opens it.

    The CLI validates ``--lister-config`` against ``config_cls`` and then
    enters ``lister_factory(config)`` for the duration of discovery.
    """

    config_cls: type[ConfigT]
    lister_factory: Callable[[ConfigT], AbstractAsyncContextManager[BinaryLister]]
