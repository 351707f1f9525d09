"""Libtest lister manifest."""

from shard_runner.discovery.libtest.config import LibtestListerConfig
from shard_runner.discovery.libtest.lister import LibtestLister
from shard_runner.discovery.manifest import ListerManifest

libtest_manifest = ListerManifest(
    config_cls=LibtestListerConfig,
    lister_factory=LibtestLister.from_config,
)
