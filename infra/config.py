"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
A missing API key for the gemini backend is a startup error.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from inference import ConfigurationError, GeminiModelBackend, ModelBackend, ModelGateway, StubModelBackend
from inference.gemini import DEFAULT_BASE_URL


# Load environment variables from .env at the project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

LLMBackendType = Literal["stub", "gemini"]


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"GEMINI_TIMEOUT_S must be a number, got {value!r}")


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    gemini_api_key: str
    gemini_model: str
    gemini_base_url: str
    gemini_timeout_s: Optional[float]

    # Service
    agent_port: int
    environment: str

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Defaults:
        - LLM: gemini (gemini-2.5-flash), key from GEMINI_API_KEY or API_KEY
        - No per-call timeout unless GEMINI_TIMEOUT_S is set
        """
        return cls(
            # LLM Configuration
            llm_backend=os.getenv("LLM_BACKEND", "gemini").lower(),  # type: ignore
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            gemini_timeout_s=_optional_float(os.getenv("GEMINI_TIMEOUT_S")),

            # Service Configuration
            agent_port=int(os.getenv("AGENT_PORT", "8000")),
            environment=os.getenv("ENVIRONMENT", "development"),
        )

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "stub":
            return StubModelBackend()

        if self.llm_backend != "gemini":
            raise ConfigurationError(f"Unknown LLM_BACKEND: {self.llm_backend!r}")

        if not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY (or API_KEY) environment variable not set")

        return GeminiModelBackend(
            api_key=self.gemini_api_key,
            model_name=self.gemini_model,
            base_url=self.gemini_base_url,
        )

    def create_gateway(self) -> ModelGateway:
        """Create the model gateway with the configured backend injected."""
        return ModelGateway(self.create_llm_backend(), timeout_s=self.gemini_timeout_s)


def get_config() -> InfraConfig:
    """Get infrastructure configuration."""
    return InfraConfig.from_env()
