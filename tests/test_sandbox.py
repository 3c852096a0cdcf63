"""Tests for the subprocess execution provider."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from auditor.instrument import instrument_source
from auditor.measurement import MeasurementRunner, parse_run_output
from providers.sandbox import SubprocessExecutionProvider


SUM_SOURCE = """
def solve(arr, counts):
    total = 0
    for i in range(len(arr)):
        counts.comparisons += 1
        total += arr[i]
    return total
"""


@pytest.fixture
def provider():
    return SubprocessExecutionProvider(python_executable=sys.executable, default_timeout=30.0)


class TestSubprocessExecutionProvider:
    """Test running harness scripts in a child process."""

    @pytest.mark.asyncio
    async def test_runs_harness(self, provider):
        script = instrument_source(SUM_SOURCE, "solve")
        result = await provider.run(script, json.dumps({"input": [3, 1, 2]}))

        assert result.exit_code == 0
        assert not result.timed_out
        measurement = parse_run_output(result.stdout, 3)
        assert measurement is not None
        assert measurement.counts.comparisons == 3
        assert measurement.counts.reads == 3

    @pytest.mark.asyncio
    async def test_stdin_reaches_child(self, provider):
        script = "import sys\nprint(sys.stdin.read().upper())\n"
        result = await provider.run(script, "hello")
        assert result.stdout.strip() == "HELLO"

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, provider):
        result = await provider.run("import sys\nsys.exit(3)\n", "")
        assert result.exit_code == 3
        assert not result.timed_out

    @pytest.mark.asyncio
    async def test_exception_in_snippet(self, provider):
        script = instrument_source("def solve(arr, counts):\n    raise RuntimeError('bad')\n", "solve")
        result = await provider.run(script, json.dumps({"input": [1]}))
        assert result.exit_code != 0
        assert parse_run_output(result.stdout, 1) is None

    @pytest.mark.asyncio
    async def test_timeout_kills_child(self, provider):
        result = await provider.run("import time\ntime.sleep(30)\n", "", timeout=0.5)
        assert result.timed_out
        assert result.exit_code == -1
        assert result.stdout == ""

    @pytest.mark.asyncio
    async def test_ladder_through_subprocess(self, provider):
        runner = MeasurementRunner(provider, timeout=30.0, max_concurrency=2)
        script = instrument_source(SUM_SOURCE, "solve")
        measurements = await runner.run_ladder(script, [5, 20])
        assert sorted((m.input_size, m.counts.comparisons) for m in measurements) == [(5, 5), (20, 20)]


REPO_ROOT = Path(__file__).resolve().parent.parent


class TestModuleImports:
    """Test provider modules import cleanly in a fresh interpreter."""

    @pytest.mark.parametrize("module", [
        "providers.oracle",
        "providers.sandbox",
        "providers.groq_provider",
        "auditor.analyzer",
    ])
    def test_import_alone(self, module):
        result = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            cwd=REPO_ROOT,
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert result.returncode == 0, result.stderr
