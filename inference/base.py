from abc import ABC, abstractmethod
from .types import ModelRequest, ModelResponse


class ModelBackend(ABC):
    """
    Abstract model boundary.
    Assistant code must depend ONLY on this interface (through ModelGateway).
    """

    @abstractmethod
    def generate(self, request: ModelRequest) -> ModelResponse:
        """Generate a response from the model."""
        raise NotImplementedError
