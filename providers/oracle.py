"""
Classification oracle interface.

An oracle is any external judge (usually an LLM) that labels code with a
problem class. Replies are untrusted: `parse_classification` validates
them and falls back to `unknown` with zero confidence.
"""

import json
import re
from typing import Any, Optional, Protocol

from auditor.config import Settings, logger
from auditor.models import AlternativeClass, ClassificationResult, ProblemClass


class OracleError(Exception):
    """Exception for oracle transport or API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ClassificationOracle(Protocol):
    async def classify(self, code: str) -> ClassificationResult:
        ...

    async def close(self) -> None:
        ...


def fallback_classification(reason: str) -> ClassificationResult:
    return ClassificationResult(
        problem_class=ProblemClass.UNKNOWN,
        confidence=0.0,
        reasoning=reason,
    )


def _as_class(value: Any) -> Optional[ProblemClass]:
    try:
        return ProblemClass(value)
    except ValueError:
        return None


def _as_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return min(1.0, max(0.0, confidence))


def extract_json(text: str) -> Optional[dict[str, Any]]:
    """Pull a JSON object out of a reply, tolerating markdown fences."""
    try:
        data = json.loads(text)
        return data if isinstance(data, dict) else None
    except (json.JSONDecodeError, TypeError):
        pass

    for pattern in (r"```json\s*\n?(.*?)\n?```", r"```\s*\n?(.*?)\n?```"):
        match = re.search(pattern, text, re.DOTALL)
        if match:
            try:
                data = json.loads(match.group(1).strip())
                return data if isinstance(data, dict) else None
            except json.JSONDecodeError:
                continue

    start = text.find("{")
    end = text.rfind("}") + 1
    if start != -1 and end > start:
        try:
            data = json.loads(text[start:end])
            return data if isinstance(data, dict) else None
        except json.JSONDecodeError:
            pass
    return None


def parse_classification(payload: Any) -> ClassificationResult:
    """
    Validate an oracle reply into a ClassificationResult.

    Accepts a dict or raw reply text. Unknown labels become `unknown`,
    confidence is clamped to [0, 1] and at most three valid alternatives
    are kept. Anything malformed yields the unknown/0 fallback.
    """
    if isinstance(payload, str):
        payload = extract_json(payload)
    if not isinstance(payload, dict):
        return fallback_classification("Oracle reply was not a JSON object")

    problem_class = _as_class(payload.get("class"))
    if problem_class is None:
        problem_class, confidence = ProblemClass.UNKNOWN, 0.0
    else:
        confidence = _as_confidence(payload.get("confidence"))

    alternatives = []
    raw_alternatives = payload.get("alternativeClasses") or []
    if isinstance(raw_alternatives, list):
        for item in raw_alternatives:
            if not isinstance(item, dict):
                continue
            alt_class = _as_class(item.get("class"))
            if alt_class is None:
                continue
            alternatives.append(AlternativeClass(
                problem_class=alt_class,
                confidence=_as_confidence(item.get("confidence")),
            ))
            if len(alternatives) == 3:
                break

    reasoning = payload.get("reasoning")
    return ClassificationResult(
        problem_class=problem_class,
        confidence=confidence,
        reasoning=reasoning if isinstance(reasoning, str) else "",
        alternative_classes=alternatives,
    )


def create_oracle(settings: Settings) -> Optional[ClassificationOracle]:
    """Build the configured oracle, or None when disabled or missing a key."""
    if settings.ORACLE_PROVIDER == "groq":
        if not settings.GROQ_API_KEY:
            logger.warning("ORACLE_PROVIDER=groq but GROQ_API_KEY is not set")
            return None
        from .groq_provider import GroqOracle
        return GroqOracle(
            api_key=settings.GROQ_API_KEY,
            model=settings.GROQ_MODEL,
            temperature=settings.TEMPERATURE,
            max_tokens=settings.MAX_TOKENS,
        )

    if settings.ORACLE_PROVIDER == "gemini":
        if not settings.GEMINI_API_KEY:
            logger.warning("ORACLE_PROVIDER=gemini but GEMINI_API_KEY is not set")
            return None
        from .gemini_provider import GeminiOracle
        return GeminiOracle(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            temperature=settings.TEMPERATURE,
            max_tokens=settings.MAX_TOKENS,
        )

    return None
