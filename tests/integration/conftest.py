"""Fixtures for integration tests."""

import stat
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import pytest

from shard_runner.models.binary import TestBinary, TestBinInfo


class MakeBinaryFn(Protocol):
    """Protocol for fake test binary creation."""

    def __call__(
        self,
        binary_id: str,
        *,
        tests: Sequence[str] = (),
        ignored: Sequence[str] = (),
        benchmarks: Sequence[str] = (),
        exit_code: int = 0,
        sleep: float = 0,
        extra_output: str = "",
        supports_ignored_filter: bool = True,
    ) -> TestBinary:
        """Create an executable that answers libtest listing flags."""


def _lines(lines: Sequence[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


@pytest.fixture
def make_binary(tmp_path: Path) -> MakeBinaryFn:
    """Create shell scripts that behave like libtest binaries when listing."""

    def _make(
        binary_id: str,
        *,
        tests: Sequence[str] = (),
        ignored: Sequence[str] = (),
        benchmarks: Sequence[str] = (),
        exit_code: int = 0,
        sleep: float = 0,
        extra_output: str = "",
        supports_ignored_filter: bool = True,
    ) -> TestBinary:
        all_lines = [f"{name}: test" for name in (*tests, *ignored)]
        all_lines += [f"{name}: benchmark" for name in benchmarks]
        if extra_output:
            all_lines.append(extra_output)
        ignored_lines = [f"{name}: test" for name in ignored]

        script = tmp_path / binary_id.replace("::", "-")
        script.write_text(
            "#!/bin/sh\n"
            f"sleep {sleep}\n"
            'case " $* " in\n'
            '  *" --ignored "*)\n'
            f"    printf '%s' '{_lines(ignored_lines)}'\n"
            "    ;;\n"
            "  *)\n"
            f"    printf '%s' '{_lines(all_lines)}'\n"
            "    ;;\n"
            "esac\n"
            f"if [ {exit_code} -ne 0 ]; then echo 'listing failed' >&2; fi\n"
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return TestBinary(
            binary_id=binary_id,
            path=script,
            package=binary_id.split("::")[0],
            kind="test",
            info=TestBinInfo(supports_ignored_filter=supports_ignored_filter),
        )

    return _make
