"""
Configuration for the Efficiency Auditor.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Classification oracle
    ORACLE_PROVIDER: Literal["none", "groq", "gemini"] = Field(default="none")
    GROQ_API_KEY: str = Field(default="")
    GROQ_MODEL: str = Field(default="meta-llama/llama-4-scout-17b-16e-instruct")
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash-lite")
    MAX_TOKENS: int = Field(default=500)
    TEMPERATURE: float = Field(default=0.1)  # Low for stable labels

    # Measurement
    SIZE_LADDER: list[int] = Field(default_factory=lambda: [10, 100, 1000, 10000])
    RUN_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    MAX_CONCURRENT_RUNS: int = Field(default=4, ge=1)
    PYTHON_EXECUTABLE: str = Field(default="")  # Empty means the current interpreter


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google").setLevel(logging.WARNING)

logger = logging.getLogger("efficiency-auditor")
