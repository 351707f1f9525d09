"""Resolve a lister key to the manifest registered for it."""

from importlib.metadata import entry_points
from typing import Any

from shard_runner.discovery.manifest import ListerManifest

ENTRY_POINT_GROUP = "shard_runner.listers"


class ListerNotFoundError(Exception):
    """No installed distribution registers a lister under the requested key."""


def load_lister_manifest(key: str) -> ListerManifest[Any]:
    """Import the manifest registered as ``key`` in the listers entry-point group.

    Raises:
        ListerNotFoundError: If no lister is registered under ``key``; the
            message names the keys that are installed

    """
    registered = {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}
    entry = registered.get(key)
    if entry is None:
        installed = ", ".join(sorted(registered)) or "none"
        raise ListerNotFoundError(
            f"No test lister registered as '{key}' (installed: {installed})"
        )

    manifest: ListerManifest[Any] = entry.load()
    return manifest
