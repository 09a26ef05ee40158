"""
Infrastructure initialization and bootstrap.

Singleton pattern for wiring the assistant from configuration. The model
gateway is created once, at startup, and injected everywhere else.
"""

from typing import Optional

from assistant.dispatcher import TaskDispatcher
from assistant.observability import ObservabilityStore
from assistant.service import PosAssistant
from assistant.tracing import StoreTracer
from inference import ModelGateway

from .config import InfraConfig, get_config


class InfraBootstrap:
    """
    Bootstrap the assistant based on configuration.

    Singleton pattern - single instance per process.
    Raises ConfigurationError when the model backend cannot be configured.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: Optional[InfraConfig] = None):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.gateway: ModelGateway = self.config.create_gateway()
        self.store = ObservabilityStore()
        self.tracer = StoreTracer(self.store)
        self.dispatcher = TaskDispatcher(self.gateway, tracer=self.tracer)
        self.assistant = PosAssistant(self.dispatcher)

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_assistant(self) -> PosAssistant:
        return self.assistant

    def get_store(self) -> ObservabilityStore:
        return self.store


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """Create (or return) the process-wide bootstrap."""
    return InfraBootstrap.get_instance(config)
