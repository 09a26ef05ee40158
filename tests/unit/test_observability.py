"""
Tests for the diagnostics store and StoreTracer.
"""

from assistant.observability import ObservabilityStore
from assistant.observability.store import PREVIEW_CHARS
from assistant.tracing import NoOpTracer, StoreTracer, TraceMetadata


class TestObservabilityStore:

    def test_fallback_preview_truncated(self):
        store = ObservabilityStore()
        store.record_fallback("t1", "voice_command", "parse_error", text="x" * (PREVIEW_CHARS + 100))
        assert len(store.get_recent_fallbacks()[0]["text_preview"]) == PREVIEW_CHARS

    def test_bounded(self):
        store = ObservabilityStore(max_fallbacks=3)
        for i in range(5):
            store.record_fallback(f"t{i}", "market_news", "transport_error")
        assert [r["trace_id"] for r in store.get_recent_fallbacks()] == ["t2", "t3", "t4"]

    def test_span_lifecycle(self):
        store = ObservabilityStore()
        store.record_span_start("s1", "t1", "upsell_suggestion", "calling")
        assert store.get_recent_spans() == []

        store.record_span_end("s1", "error")
        span = store.get_recent_spans()[0]
        assert span["status"] == "error"
        assert span["duration_ms"] >= 0

    def test_unknown_span_end_ignored(self):
        store = ObservabilityStore()
        store.record_span_end("missing")
        assert store.get_recent_spans() == []


class TestTracers:

    def test_noop(self):
        tracer = NoOpTracer()
        assert tracer.start_span("x", {}, TraceMetadata(trace_id="t", task="market_news")) is None
        assert not tracer.is_enabled()

    def test_store_tracer_records_only_fallback_events(self):
        store = ObservabilityStore()
        tracer = StoreTracer(store)
        meta = TraceMetadata(trace_id="t", task="smart_insights")

        tracer.record_event("something_else", {}, meta)
        tracer.record_event("fallback_used", {"failure": "shape_error", "stage": "validating"}, meta)

        records = store.get_recent_fallbacks()
        assert len(records) == 1
        assert records[0]["task"] == "smart_insights"
        assert records[0]["stage"] == "validating"
