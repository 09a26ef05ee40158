from assistant.observability.store import FallbackRecord, ObservabilityStore, SpanRecord

__all__ = ["FallbackRecord", "ObservabilityStore", "SpanRecord"]
