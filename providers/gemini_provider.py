"""
Gemini classification oracle.
"""
from __future__ import annotations

from google import genai
from google.genai import types

from auditor.config import logger
from auditor.models import ClassificationResult
from auditor.prompts import SYSTEM_PROMPT, build_classification_prompt

from .oracle import fallback_classification, parse_classification


class GeminiOracle:
    """
    Gemini-backed oracle for problem classification.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-lite",
        temperature: float = 0.1,
        max_tokens: int = 500,
    ):
        self._client: genai.Client | None = None
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._initialize(api_key)

    def _initialize(self, api_key: str) -> None:
        """Initialize Gemini client."""
        if not api_key:
            logger.warning("Gemini API key not configured")
            return

        try:
            self._client = genai.Client(api_key=api_key)
            logger.info(f"Gemini oracle initialized with model: {self._model}")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {e}")

    def is_available(self) -> bool:
        """Check if oracle is available."""
        return self._client is not None

    def get_model_name(self) -> str:
        return self._model

    async def close(self) -> None:
        self._client = None

    async def classify(self, code: str) -> ClassificationResult:
        """
        Classify code using Gemini.

        Failures are logged and returned as the unknown/0 fallback.
        """
        if not self._client:
            return fallback_classification("Gemini client not initialized")

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=[
                    types.Content(
                        role="user",
                        parts=[types.Part(text=build_classification_prompt(code))]
                    )
                ],
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=self._temperature,
                    max_output_tokens=self._max_tokens,
                    response_mime_type="application/json",
                )
            )
        except Exception as e:
            logger.error(f"Gemini classification failed: {e}")
            return fallback_classification(f"Oracle request failed: {e}")

        response_text = response.text or ""
        logger.debug(f"Raw Gemini response: {response_text[:500]}...")
        return parse_classification(response_text)
