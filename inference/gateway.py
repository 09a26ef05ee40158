"""
Single-call gateway to the generative-language service.

The gateway is the uniform transport-error boundary: whatever the backend
does, callers get exactly one ModelResponse back and never an exception.
A non-success status is the Unavailable signal.
"""

import logging
from typing import Optional

from .base import ModelBackend
from .types import InlineImage, ModelRequest, ModelResponse, ReasoningEffort

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised at construction time when the service handle is missing."""


class ModelGateway:
    """
    Issues one call per request. No retry, no cache.

    The backend is injected once at construction; a missing backend is a
    startup error, not something each call has to rediscover.
    """

    def __init__(self, backend: Optional[ModelBackend], timeout_s: Optional[float] = None):
        if backend is None:
            raise ConfigurationError("ModelGateway requires a model backend")
        self.backend = backend
        self.timeout_s = timeout_s

    def call(
        self,
        task: str,
        prompt: str,
        image: Optional[InlineImage] = None,
        response_format: Optional[str] = None,
        reasoning_effort: Optional[ReasoningEffort] = None,
        trace_id: Optional[str] = None,
    ) -> ModelResponse:
        request = ModelRequest(
            task=task,
            prompt=prompt,
            image=image,
            response_format=response_format,
            reasoning_effort=reasoning_effort,
            timeout_s=self.timeout_s,
            trace_id=trace_id,
        )

        try:
            response = self.backend.generate(request)
        except Exception as e:
            logger.warning(f"Model backend raised during {task} [trace_id={trace_id}]: {e}")
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={"trace_id": trace_id, "error": str(e)},
            )

        if not isinstance(response, ModelResponse):
            return ModelResponse(
                status="fatal_error",
                error_type="invalid_output",
                metadata={"trace_id": trace_id, "error": f"unexpected {type(response).__name__}"},
            )

        return response
