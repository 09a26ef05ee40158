"""
Model boundary layer for the generative-language service.

This package provides a clean abstraction for model invocation,
allowing the assistant to remain agnostic of the underlying backend.

Supported backends:
- StubModelBackend: Deterministic fake model (default for CI/tests)
- GeminiModelBackend: Gemini generateContent over HTTPS

Example usage:
    from inference import ModelGateway, StubModelBackend

    gateway = ModelGateway(StubModelBackend())
    response = gateway.call(task="market_news", prompt="Headline please")
"""

from .types import InlineImage, ModelRequest, ModelResponse, ModelStatus, ReasoningEffort
from .base import ModelBackend
from .stub import StubModelBackend
from .gemini import GeminiModelBackend
from .gateway import ConfigurationError, ModelGateway

__all__ = [
    "InlineImage",
    "ModelRequest",
    "ModelResponse",
    "ModelStatus",
    "ReasoningEffort",
    "ModelBackend",
    "StubModelBackend",
    "GeminiModelBackend",
    "ConfigurationError",
    "ModelGateway",
]
