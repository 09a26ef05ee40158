"""
In-memory diagnostics store for operator visibility.

Collects metadata from the tracer.
- Bounded size (FIFO eviction)
- Thread-safe
- Non-blocking
- No persistence
- Model text only as a short preview
"""

from collections import deque
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List
from datetime import datetime
import threading
import logging

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500


@dataclass
class SpanRecord:
    """Metadata from a span (pipeline stage execution)."""
    span_id: str
    trace_id: str
    task: str
    stage: str
    start_time: str
    end_time: Optional[str] = None
    duration_ms: Optional[float] = None
    status: str = "in-progress"  # success, error, in-progress


@dataclass
class FallbackRecord:
    """Why a call ended in its fallback value."""
    timestamp: str
    trace_id: str
    task: str
    failure: str
    stage: Optional[str] = None
    error: Optional[str] = None
    text_preview: Optional[str] = None


class ObservabilityStore:
    """
    Thread-safe, bounded in-memory store for diagnostics metadata.

    Stores only:
    - Span metadata (stage execution times, status)
    - Fallback records (task, failure kind, error, truncated model text)

    Does NOT store:
    - Prompts
    - Images
    - Domain records
    """

    def __init__(self, max_spans: int = 500, max_fallbacks: int = 200):
        self.spans: deque = deque(maxlen=max_spans)
        self.fallbacks: deque = deque(maxlen=max_fallbacks)

        self._lock = threading.RLock()
        self._active_spans: Dict[str, SpanRecord] = {}  # span_id -> SpanRecord

    def record_span_start(self, span_id: str, trace_id: str, task: str, stage: str) -> None:
        """Record span start."""
        try:
            with self._lock:
                self._active_spans[span_id] = SpanRecord(
                    span_id=span_id,
                    trace_id=trace_id,
                    task=task,
                    stage=stage,
                    start_time=datetime.now().isoformat(),
                )
        except Exception as e:
            logger.debug(f"Failed to record span start: {e}")

    def record_span_end(self, span_id: str, status: str = "success") -> None:
        """Record span end and move to completed."""
        try:
            with self._lock:
                if span_id in self._active_spans:
                    record = self._active_spans.pop(span_id)
                    record.end_time = datetime.now().isoformat()
                    record.status = status
                    start = datetime.fromisoformat(record.start_time)
                    end = datetime.fromisoformat(record.end_time)
                    record.duration_ms = (end - start).total_seconds() * 1000
                    self.spans.append(record)
        except Exception as e:
            logger.debug(f"Failed to record span end: {e}")

    def record_fallback(
        self,
        trace_id: str,
        task: str,
        failure: str,
        stage: Optional[str] = None,
        error: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        """Record a fallback with its diagnostic detail."""
        try:
            with self._lock:
                self.fallbacks.append(FallbackRecord(
                    timestamp=datetime.now().isoformat(),
                    trace_id=trace_id,
                    task=task,
                    failure=failure,
                    stage=stage,
                    error=error,
                    text_preview=text[:PREVIEW_CHARS] if text else None,
                ))
        except Exception as e:
            logger.debug(f"Failed to record fallback: {e}")

    def get_recent_spans(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Get recent completed spans."""
        with self._lock:
            return [asdict(s) for s in list(self.spans)[-limit:]]

    def get_recent_fallbacks(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Get recent fallback records."""
        with self._lock:
            return [asdict(f) for f in list(self.fallbacks)[-limit:]]

    def clear(self) -> None:
        with self._lock:
            self.spans.clear()
            self.fallbacks.clear()
            self._active_spans.clear()
