"""Lister for libtest-style test binaries."""

from shard_runner.discovery.libtest.config import LibtestListerConfig
from shard_runner.discovery.libtest.lister import LibtestLister
from shard_runner.discovery.libtest.manifest import libtest_manifest

__all__ = ["LibtestLister", "LibtestListerConfig", "libtest_manifest"]
