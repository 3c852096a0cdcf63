"""Shared fixtures and stubs for the auditor tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from auditor.config import Settings
from auditor.models import ClassificationResult, ExecutionResult, ProblemClass


class StubOracle:
    """Deterministic oracle returning a fixed verdict."""

    def __init__(self, verdict=None, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []
        self.closed = False

    async def classify(self, code):
        self.calls.append(code)
        if self.error is not None:
            raise self.error
        return self.verdict

    async def close(self):
        self.closed = True


class StubProvider:
    """Execution provider answering from a table keyed by input length."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def run(self, instrumented_source, input_json, timeout=None):
        import json

        size = len(json.loads(input_json)["input"])
        self.calls.append(size)
        response = self.responses.get(size)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return ExecutionResult(stdout="", exit_code=1)
        return response


def counts_line(comparisons=0, swaps=0, reads=0, writes=0, time_ns=1000):
    import json

    return json.dumps({
        "counts": {
            "comparisons": comparisons,
            "swaps": swaps,
            "reads": reads,
            "writes": writes,
            "allocations": 0,
            "functionCalls": 0,
        },
        "timeNs": time_ns,
    })


def verdict(problem_class, confidence, alternatives=()):
    return ClassificationResult(
        problem_class=ProblemClass(problem_class),
        confidence=confidence,
        reasoning="stub",
        alternative_classes=[
            {"class": cls, "confidence": conf} for cls, conf in alternatives
        ],
    )


@pytest.fixture
def test_settings():
    return Settings(
        ORACLE_PROVIDER="none",
        SIZE_LADDER=[10, 100, 1000],
        RUN_TIMEOUT_SECONDS=5.0,
        MAX_CONCURRENT_RUNS=2,
    )
