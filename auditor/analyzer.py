"""
Efficiency Auditor.

End-to-end pipeline: detect patterns, classify, instrument the source, run
it across a ladder of input sizes and score each run against the
theoretical minimum for its problem class.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from .bounds import ParamsLike, format_citation, get_bound
from .calculator import (
    calculate_efficiency_from_counts,
    format_efficiency,
    generate_efficiency_bar,
    select_operations,
)
from .classifier import classify_code
from .config import Settings, get_settings, logger
from .instrument import instrument_source
from .measurement import (
    InputGenerator,
    MeasurementRunner,
    calculate_stats,
    generate_random_input,
    infer_complexity,
)
from .models import AuditReport, ClassificationResult
from .patterns import detect_code_patterns

if TYPE_CHECKING:
    from providers.oracle import ClassificationOracle
    from providers.sandbox import ExecutionProvider


class EfficiencyAuditor:
    """
    Audits the algorithmic efficiency of a code snippet.

    Takes Python source with an entry point `fn(arr, counts)`, returns an
    AuditReport with one efficiency per input size that ran successfully.
    """

    def __init__(
        self,
        oracle: Optional[ClassificationOracle] = None,
        provider: Optional[ExecutionProvider] = None,
        settings: Optional[Settings] = None,
    ):
        # providers import auditor.config, so they load after this package
        from providers.oracle import create_oracle
        from providers.sandbox import SubprocessExecutionProvider

        self.settings = settings or get_settings()
        self._oracle = oracle if oracle is not None else create_oracle(self.settings)
        self._provider = provider or SubprocessExecutionProvider(
            python_executable=self.settings.PYTHON_EXECUTABLE,
            default_timeout=self.settings.RUN_TIMEOUT_SECONDS,
        )
        self._runner = MeasurementRunner(
            self._provider,
            timeout=self.settings.RUN_TIMEOUT_SECONDS,
            max_concurrency=self.settings.MAX_CONCURRENT_RUNS,
        )

    async def close(self) -> None:
        """Close the oracle connection."""
        if self._oracle:
            await self._oracle.close()
            self._oracle = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def classify(self, code: str) -> ClassificationResult:
        return await classify_code(code, oracle=self._oracle)

    async def audit(
        self,
        code: str,
        entry_point: str = "solve",
        sizes: Optional[Sequence[int]] = None,
        generate_input: Optional[InputGenerator] = None,
        params_for_size: Optional[Callable[[int], ParamsLike]] = None,
        classification: Optional[ClassificationResult] = None,
    ) -> AuditReport:
        """
        Audit code efficiency.

        Args:
            code: Python source defining `entry_point(arr, counts)`
            entry_point: Name of the function to measure
            sizes: Input-size ladder (defaults to SIZE_LADDER)
            generate_input: Builds the input list for a size
            params_for_size: Bound parameters for a size (defaults to n=size)
            classification: Skip classification and use this verdict

        Returns:
            AuditReport; sizes that failed to run are left out

        Raises:
            ValueError: If code is empty or entry_point is not an identifier
        """
        if not code or not code.strip():
            raise ValueError("Code cannot be empty")

        source = instrument_source(code, entry_point)
        patterns = detect_code_patterns(code)

        if classification is None:
            classification = await classify_code(code, oracle=self._oracle)
        problem_class = classification.problem_class
        logger.info(
            f"Classified as {problem_class.value} "
            f"(confidence {classification.confidence:.2f})"
        )

        ladder = list(sizes) if sizes is not None else list(self.settings.SIZE_LADDER)
        measurements = await self._runner.run_ladder(
            source,
            ladder,
            generate_input or generate_random_input,
        )
        measurements.sort(key=lambda m: m.input_size)

        bound = get_bound(problem_class)
        operation_type = bound.operation_type if bound is not None else "operations"
        empirical = infer_complexity(
            (m.input_size, select_operations(m.counts, operation_type)) for m in measurements
        )

        efficiencies = []
        for measurement in measurements:
            params: Any = (
                params_for_size(measurement.input_size)
                if params_for_size is not None
                else {"n": measurement.input_size}
            )
            efficiency = calculate_efficiency_from_counts(
                problem_class,
                measurement.counts,
                params,
                classification_confidence=classification.confidence,
            )
            efficiencies.append(
                efficiency.model_copy(update={"empirical_complexity": empirical.complexity})
            )

        summary = efficiencies[-1] if efficiencies else None
        ratio = summary.efficiency_ratio if summary is not None else 0.0

        return AuditReport(
            classification=classification,
            patterns=patterns,
            measurements=measurements,
            efficiencies=efficiencies,
            summary=summary,
            empirical=empirical,
            stats=calculate_stats(measurements),
            citation=format_citation(bound.citation) if bound is not None else "",
            formatted_efficiency=format_efficiency(ratio),
            efficiency_bar=generate_efficiency_bar(ratio),
        )
