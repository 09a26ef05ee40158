"""
Tool-agnostic tracing abstraction.

This module defines the Tracer interface that all diagnostics sinks follow.
Tracing is strictly passive:
- Never influences execution
- Never alters the returned result
- Failures are silent and non-fatal
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from dataclasses import dataclass
from uuid import uuid4

from assistant.observability.store import ObservabilityStore


@dataclass
class TraceMetadata:
    """Metadata associated with a trace span or event."""

    trace_id: str  # Mandatory: unique per dispatcher run
    task: str


class Tracer(ABC):
    """
    Abstract tracing interface.

    All implementations MUST guarantee:
    - No control flow influence
    - Non-fatal failures (never raise)
    - Best-effort execution
    """

    @abstractmethod
    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        """
        Start a trace span (e.g. "build", "call", "validate").

        Returns:
            Span handle (can be used in end_span, or None if tracing disabled)
        """
        pass

    @abstractmethod
    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        """End a trace span with "success" or "error"."""
        pass

    @abstractmethod
    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        """Record a point-in-time event (e.g. "fallback_used")."""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if tracing is enabled."""
        pass


class NoOpTracer(Tracer):
    """
    No-op tracing implementation (when tracing is disabled).

    Satisfies the Tracer interface but does nothing.
    """

    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        """No-op implementation."""
        return None

    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        """No-op implementation."""
        pass

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        """No-op implementation."""
        pass

    def is_enabled(self) -> bool:
        """Tracing is disabled."""
        return False


class StoreTracer(Tracer):
    """Tracer that writes span and fallback metadata into an ObservabilityStore."""

    def __init__(self, store: Optional[ObservabilityStore] = None):
        self.store = store or ObservabilityStore()

    def start_span(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> Optional[Any]:
        span_id = str(uuid4())
        self.store.record_span_start(span_id, trace_metadata.trace_id, trace_metadata.task, name)
        return span_id

    def end_span(self, span: Any, status: str, metadata: Dict[str, Any]) -> None:
        if span is not None:
            self.store.record_span_end(span, status)

    def record_event(
        self, name: str, metadata: Dict[str, Any], trace_metadata: TraceMetadata
    ) -> None:
        if name != "fallback_used":
            return
        self.store.record_fallback(
            trace_id=trace_metadata.trace_id,
            task=trace_metadata.task,
            failure=str(metadata.get("failure")),
            stage=metadata.get("stage"),
            error=metadata.get("error"),
            text=metadata.get("text"),
        )

    def is_enabled(self) -> bool:
        return True
