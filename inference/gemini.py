import logging
from typing import Any, Dict, List

import requests

from .base import ModelBackend
from .types import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

# Reasoning effort -> thinkingBudget. "default" leaves the service's own budget.
_THINKING_BUDGETS = {"minimal": 0}


def _extract_text(data: Dict[str, Any]) -> str:
    """
    Concatenate the text parts of the first candidate.

    A response with no candidates (e.g. blocked by safety filters) yields "".
    """
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


class GeminiModelBackend(ModelBackend):
    """
    Gemini backend over the generateContent REST endpoint.

    One POST per request, no retry. Transport failures are returned as
    non-success ModelResponse values, never raised.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", base_url: str = DEFAULT_BASE_URL):
        """
        Initialize Gemini backend.

        Args:
            api_key:    Generative Language API key
            model_name: Model identity (e.g. "gemini-2.5-flash")
            base_url:   Base URL of the service
        """
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")

    def build_payload(self, request: ModelRequest) -> Dict[str, Any]:
        """Translate a ModelRequest into the generateContent request body."""
        parts: List[Dict[str, Any]] = []
        if request.image is not None:
            parts.append({
                "inlineData": {
                    "mimeType": request.image.mime_type,
                    "data": request.image.data,
                }
            })
        parts.append({"text": request.prompt})

        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}

        generation_config: Dict[str, Any] = {}
        if request.response_format:
            generation_config["responseMimeType"] = request.response_format
        budget = _THINKING_BUDGETS.get(request.reasoning_effort or "default")
        if budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": budget}
        if generation_config:
            payload["generationConfig"] = generation_config

        return payload

    def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Generate a response using Gemini generateContent.

        Args:
            request: ModelRequest with prompt, optional image and hints

        Returns:
            ModelResponse with the raw response text (possibly empty)
        """
        base_metadata = {
            "backend": "gemini",
            "model": self.model_name,
            "trace_id": request.trace_id,
        }

        try:
            resp = requests.post(
                f"{self.base_url}/v1beta/models/{self.model_name}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json=self.build_payload(request),
                timeout=request.timeout_s,
            )

            resp.raise_for_status()
            output = _extract_text(resp.json())

            return ModelResponse(
                status="success",
                output=output,
                metadata=base_metadata,
            )

        except requests.Timeout:
            return ModelResponse(
                status="recoverable_error",
                error_type="timeout",
                metadata=base_metadata,
            )

        except requests.ConnectionError as e:
            return ModelResponse(
                status="recoverable_error",
                error_type="connection",
                metadata={**base_metadata, "error": str(e)},
            )

        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.debug(f"Gemini returned HTTP {status_code} for task {request.task}")
            return ModelResponse(
                status="fatal_error",
                error_type="http_error",
                metadata={**base_metadata, "error": str(e), "status_code": status_code},
            )

        except Exception as e:
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={**base_metadata, "error": str(e)},
            )
