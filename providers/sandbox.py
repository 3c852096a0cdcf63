"""
Execution providers for instrumented code.

The measurement runner hands a harness script and a JSON input to a
provider and gets back stdout, the exit code and whether the wall-clock
budget ran out.
"""

import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from auditor.config import logger
from auditor.models import ExecutionResult


class ExecutionProvider(Protocol):
    """Anything that can run instrumented source against a JSON input."""

    async def run(
        self,
        instrumented_source: str,
        input_json: str,
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        ...


class SubprocessExecutionProvider:
    """
    Runs harness scripts in a separate Python process.

    Input goes over stdin. The child is killed once `timeout` seconds pass.
    """

    # Directory holding the `auditor` package, so the harness can import it
    PACKAGE_ROOT = str(Path(__file__).resolve().parent.parent)

    def __init__(self, python_executable: str = "", default_timeout: float = 10.0):
        self.python_executable = python_executable or sys.executable
        self.default_timeout = default_timeout

    def _child_env(self) -> dict[str, str]:
        env = dict(os.environ)
        existing = env.get("PYTHONPATH")
        env["PYTHONPATH"] = (
            self.PACKAGE_ROOT if not existing else os.pathsep.join([self.PACKAGE_ROOT, existing])
        )
        return env

    async def run(
        self,
        instrumented_source: str,
        input_json: str,
        timeout: Optional[float] = None,
    ) -> ExecutionResult:
        budget = timeout if timeout is not None else self.default_timeout

        with tempfile.TemporaryDirectory() as tmpdir:
            script = Path(tmpdir) / "harness.py"
            script.write_text(instrumented_source, encoding="utf-8")

            proc = await asyncio.create_subprocess_exec(
                self.python_executable,
                str(script),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=tmpdir,
                env=self._child_env(),
            )

            try:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(input_json.encode("utf-8")),
                    timeout=budget,
                )
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                return ExecutionResult(stdout="", exit_code=-1, timed_out=True)

        if proc.returncode != 0:
            logger.debug(f"Harness stderr: {stderr.decode('utf-8', errors='replace')[-500:]}")

        return ExecutionResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            exit_code=proc.returncode,
            timed_out=False,
        )
