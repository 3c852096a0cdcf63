"""Tests for the end-to-end auditor pipeline."""

import pytest

from conftest import StubOracle, StubProvider, counts_line, verdict
from auditor.analyzer import EfficiencyAuditor
from auditor.models import ExecutionResult, ProblemClass


LINEAR_SOURCE = """
def solve(arr, counts):
    target = -1
    for i in range(len(arr)):
        counts.comparisons += 1
        if arr[i] == target:
            return i
    return -1
"""


def linear_provider(*sizes):
    return StubProvider({size: ExecutionResult(stdout=counts_line(comparisons=size)) for size in sizes})


class TestEfficiencyAuditor:
    """Test EfficiencyAuditor.audit with stubbed execution."""

    @pytest.mark.asyncio
    async def test_full_audit(self, test_settings):
        provider = linear_provider(10, 100, 1000)
        async with EfficiencyAuditor(provider=provider, settings=test_settings) as auditor:
            report = await auditor.audit(LINEAR_SOURCE)

        assert report.classification.problem_class == ProblemClass.LINEAR_SEARCH
        assert [m.input_size for m in report.measurements] == [10, 100, 1000]
        assert [e.efficiency_ratio for e in report.efficiencies] == [100, 100, 100]
        assert report.summary.input_size == 1000
        assert report.empirical.complexity == "O(n)"
        assert all(e.empirical_complexity == "O(n)" for e in report.efficiencies)
        assert report.formatted_efficiency == "100%"
        assert report.efficiency_bar == "█" * 50
        assert report.citation
        assert report.patterns.has_loops

    @pytest.mark.asyncio
    async def test_failed_sizes_dropped(self, test_settings):
        provider = StubProvider({
            10: ExecutionResult(stdout=counts_line(comparisons=20)),
            100: ExecutionResult(stdout="", exit_code=-1, timed_out=True),
            1000: ExecutionResult(stdout=counts_line(comparisons=2000)),
        })
        auditor = EfficiencyAuditor(provider=provider, settings=test_settings)
        report = await auditor.audit(LINEAR_SOURCE)

        assert [m.input_size for m in report.measurements] == [10, 1000]
        assert report.summary.input_size == 1000
        assert report.summary.efficiency_ratio == pytest.approx(50)
        assert report.summary.wasted_operations == 1000

    @pytest.mark.asyncio
    async def test_nothing_ran(self, test_settings):
        auditor = EfficiencyAuditor(provider=StubProvider({}), settings=test_settings)
        report = await auditor.audit(LINEAR_SOURCE)

        assert report.measurements == []
        assert report.summary is None
        assert report.formatted_efficiency == "0.00%"
        assert report.efficiency_bar == "░" * 50
        assert report.empirical.complexity == "unknown"

    @pytest.mark.asyncio
    async def test_explicit_sizes_and_classification(self, test_settings):
        provider = linear_provider(4, 16)
        auditor = EfficiencyAuditor(provider=provider, settings=test_settings)
        report = await auditor.audit(
            "def run(arr, counts):\n    return arr\n",
            entry_point="run",
            sizes=[4, 16],
            classification=verdict("comparison-sort", 0.9),
        )
        assert sorted(provider.calls) == [4, 16]
        assert report.classification.confidence == 0.9
        assert report.summary.problem_class == ProblemClass.COMPARISON_SORT
        assert report.summary.classification_confidence == 0.9

    @pytest.mark.asyncio
    async def test_params_for_size(self, test_settings):
        provider = linear_provider(10)
        auditor = EfficiencyAuditor(provider=provider, settings=test_settings)
        report = await auditor.audit(
            LINEAR_SOURCE,
            sizes=[10],
            params_for_size=lambda size: {"n": size * 2},
        )
        assert report.summary.theoretical_minimum == 20
        assert report.summary.input_size == 20

    @pytest.mark.asyncio
    async def test_custom_input_generator(self, test_settings):
        provider = linear_provider(7)
        auditor = EfficiencyAuditor(provider=provider, settings=test_settings)
        report = await auditor.audit(LINEAR_SOURCE, sizes=[7], generate_input=lambda n: [0] * n)
        assert len(report.measurements) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["", "   \n"])
    async def test_empty_code_rejected(self, test_settings, code):
        auditor = EfficiencyAuditor(provider=StubProvider({}), settings=test_settings)
        with pytest.raises(ValueError):
            await auditor.audit(code)

    @pytest.mark.asyncio
    async def test_bad_entry_point_rejected(self, test_settings):
        provider = StubProvider({})
        auditor = EfficiencyAuditor(provider=provider, settings=test_settings)
        with pytest.raises(ValueError):
            await auditor.audit(LINEAR_SOURCE, entry_point="not valid")
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_oracle_used_and_closed(self, test_settings):
        oracle = StubOracle(verdict("linear-search", 0.95))
        async with EfficiencyAuditor(oracle=oracle, provider=StubProvider({}), settings=test_settings) as auditor:
            result = await auditor.classify(LINEAR_SOURCE)
        assert result.confidence == 0.95
        assert oracle.calls == [LINEAR_SOURCE]
        assert oracle.closed
