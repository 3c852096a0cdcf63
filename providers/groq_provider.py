"""
Groq classification oracle.

Calls the Groq chat-completions API in JSON mode and turns the reply into a
ClassificationResult.
"""

import asyncio
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from auditor.config import logger
from auditor.models import ClassificationResult
from auditor.prompts import SYSTEM_PROMPT, build_classification_prompt

from .oracle import OracleError, fallback_classification, parse_classification


class GroqOracle:
    """
    Groq-backed oracle with JSON mode enabled.
    """

    BASE_URL = "https://api.groq.com/openai/v1/chat/completions"

    def __init__(
        self,
        api_key: str,
        model: str = "meta-llama/llama-4-scout-17b-16e-instruct",
        temperature: float = 0.1,
        max_tokens: int = 500,
    ):
        """
        Initialize Groq oracle.

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError(
                "GROQ_API_KEY not set. "
                "Get your key from https://console.groq.com"
            )
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _make_request(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        """
        Make API request to Groq with JSON mode enabled.

        Args:
            messages: Chat messages

        Returns:
            API response dict
        """
        client = await self._get_client()

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

        response = await client.post(self.BASE_URL, json=payload)

        if response.status_code == 429:
            # Rate limit - wait and retry once
            await asyncio.sleep(2)
            response = await client.post(self.BASE_URL, json=payload)

        if response.status_code != 200:
            error_detail = response.text
            try:
                error_detail = response.json().get("error", {}).get("message", error_detail)
            except ValueError:
                pass
            raise OracleError(
                f"API error ({response.status_code}): {error_detail}",
                status_code=response.status_code,
            )

        return response.json()

    async def complete(self, prompt: str, system_prompt: str) -> str:
        """Raw reply text for one prompt."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        response = await self._make_request(messages)
        try:
            return response["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise OracleError(f"Unexpected response shape: {e}")

    async def classify(self, code: str) -> ClassificationResult:
        """
        Classify code into a problem class.

        Transport and API failures are logged and returned as the
        unknown/0 fallback.
        """
        try:
            content = await self.complete(build_classification_prompt(code), SYSTEM_PROMPT)
        except (OracleError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Groq classification failed: {e}")
            return fallback_classification(f"Oracle request failed: {e}")

        return parse_classification(content)
