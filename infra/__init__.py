"""
Infrastructure module exports.

Configuration and bootstrap for the model gateway and assistant.
"""

from .config import InfraConfig, get_config, LLMBackendType
from .bootstrap import InfraBootstrap, bootstrap_infrastructure

__all__ = [
    "InfraConfig",
    "get_config",
    "LLMBackendType",
    "InfraBootstrap",
    "bootstrap_infrastructure",
]
