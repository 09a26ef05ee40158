"""Tracing infrastructure for diagnostics."""

from assistant.tracing.tracer import Tracer, TraceMetadata, NoOpTracer, StoreTracer

__all__ = [
    "Tracer",
    "TraceMetadata",
    "NoOpTracer",
    "StoreTracer",
]
