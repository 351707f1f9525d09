"""Libtest lister implementation."""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass

from shard_runner.discovery.base import BinaryLister
from shard_runner.discovery.libtest.config import LibtestListerConfig
from shard_runner.errors import DiscoveryError
from shard_runner.models.binary import TestBinary
from shard_runner.models.case import NativeTestInfo

log = logging.getLogger(__name__)

LIST_ARGS = ("--list", "--format", "terse")
TEST_SUFFIX = ": test"
BENCHMARK_SUFFIX = ": benchmark"


@dataclass(frozen=True, kw_only=True)
class LibtestLister(BinaryLister):
    """Lists tests by running ``<binary> --list --format terse``.

    Ignored tests are found with a second call adding ``--ignored`` when the
    binary supports it.
    """

    config: LibtestListerConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: LibtestListerConfig
    ) -> AsyncGenerator["LibtestLister", None]:
        """Create a lister for the duration of a run."""
        yield cls(config=config)

    async def list_tests(self, binary: TestBinary) -> Sequence[NativeTestInfo]:
        """Return the binary's tests, flagging the ignored ones."""
        names = parse_terse_list(binary, await self._run_list(binary, LIST_ARGS))
        ignored: set[str] = set()
        if binary.info.supports_ignored_filter:
            ignored = set(
                parse_terse_list(
                    binary, await self._run_list(binary, (*LIST_ARGS, "--ignored"))
                )
            )

        log.debug(
            "Listed %s: %d test(s), %d ignored",
            binary.binary_id,
            len(names),
            len(ignored),
        )
        return [NativeTestInfo(name=name, ignored=name in ignored) for name in names]

    async def _run_list(self, binary: TestBinary, args: Sequence[str]) -> str:
        """Invoke the binary with listing arguments and return its stdout."""
        argv = [*self.config.runner, binary.path, *args]
        env = {**os.environ, **self.config.extra_env}
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
                env=env,
            )
        except OSError as e:
            raise DiscoveryError(
                binary.binary_id, f"failed to execute {binary.path}: {e}"
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.config.timeout
            )
        except TimeoutError:
            raise DiscoveryError(
                binary.binary_id,
                f"listing did not complete within {self.config.timeout} seconds",
            ) from None
        finally:
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
                # Reap the child even when this task is being cancelled.
                await asyncio.shield(process.wait())

        if process.returncode != 0:
            raise DiscoveryError(
                binary.binary_id,
                f"{' '.join(argv)} exited with code {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}",
            )

        try:
            return stdout.decode()
        except UnicodeDecodeError as e:
            raise DiscoveryError(
                binary.binary_id, f"listing output is not valid UTF-8: {e}"
            ) from e


def parse_terse_list(binary: TestBinary, output: str) -> Sequence[str]:
    """Parse libtest's terse listing into test names, in output order.

    Benchmarks are only kept for benchmark binaries.

    Raises:
        DiscoveryError: If a line is not a test or benchmark entry

    """
    names: list[str] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if line.endswith(TEST_SUFFIX):
            names.append(line.removesuffix(TEST_SUFFIX))
        elif line.endswith(BENCHMARK_SUFFIX):
            if binary.is_benchmark:
                names.append(line.removesuffix(BENCHMARK_SUFFIX))
        else:
            raise DiscoveryError(
                binary.binary_id,
                f"line '{line}' did not end with '{TEST_SUFFIX}' "
                f"or '{BENCHMARK_SUFFIX}'",
            )
    return names
