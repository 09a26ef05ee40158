from dataclasses import dataclass
from typing import Optional, Dict, Any, Literal

ModelStatus = Literal["success", "recoverable_error", "fatal_error"]
ReasoningEffort = Literal["minimal", "default"]


@dataclass(frozen=True)
class InlineImage:
    """Base64-encoded image sent alongside the prompt text."""

    data: str
    mime_type: str = "image/jpeg"


@dataclass
class ModelRequest:
    task: str                  # TaskKind value, e.g. "voice_command"
    prompt: str
    image: Optional[InlineImage] = None
    response_format: Optional[str] = None   # e.g. "application/json"
    reasoning_effort: Optional[ReasoningEffort] = None
    timeout_s: Optional[float] = None       # None: wait as long as the service takes
    trace_id: Optional[str] = None


@dataclass
class ModelResponse:
    status: ModelStatus
    output: Optional[str] = None
    error_type: Optional[str] = None   # timeout | connection | http_error | backend_unavailable
    metadata: Optional[Dict[str, Any]] = None

    @property
    def is_available(self) -> bool:
        """False when the call itself failed (the Unavailable signal)."""
        return self.status == "success"
