"""
LangGraph-based task dispatcher.

The public entry point of the assistant layer. One run wires
Build -> Call -> Sanitize -> Validate for a task and substitutes the task's
fallback value when any stage fails.

Graph:
    precondition -> build -> call -> sanitize -> validate -> done
         |            |       |         |           |
         +------------+-------+---------+-----------+--> fallback

Hard rules:
- Every stage either succeeds or sets `failure`; a failed stage routes
  straight to fallback_node (no retries, no backtracking)
- The model is called only through ModelGateway, at most once per run
- Unmet preconditions short-circuit before building; they are no-ops, not errors
- run() always returns a TaskResult for any TaskKind; only a non-TaskKind
  task value raises (ValueError)
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from langgraph.graph import StateGraph

from assistant.domain import DomainSlice
from assistant.fallbacks import fallback_for
from assistant.parsing.sanitizer import sanitize
from assistant.parsing.validator import ResponseValidator
from assistant.prompting.request_builder import RequestBuilder
from assistant.results import TaskResult, ValidationFailure
from assistant.state_schema import DispatchState
from assistant.tasks import FailureKind, TaskKind, TASK_PROFILES
from assistant.tracing import NoOpTracer, TraceMetadata, Tracer
from inference import ModelGateway

logger = logging.getLogger(__name__)

_TEXT_PREVIEW_CHARS = 500


class TaskDispatcher:
    """
    Runs one task through the pipeline and always returns a typed result.

    The gateway is injected; there is no lazily-created service handle.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        request_builder: Optional[RequestBuilder] = None,
        validator: Optional[ResponseValidator] = None,
        tracer: Optional[Tracer] = None,
    ):
        self.gateway = gateway
        self.request_builder = request_builder or RequestBuilder()
        self.validator = validator or ResponseValidator()
        self.tracer = tracer or NoOpTracer()
        self.graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(DispatchState)

        graph.add_node("precondition_node", self._precondition_node)
        graph.add_node("build_node", self._build_node)
        graph.add_node("call_node", self._call_node)
        graph.add_node("sanitize_node", self._sanitize_node)
        graph.add_node("validate_node", self._validate_node)
        graph.add_node("done_node", self._done_node)
        graph.add_node("fallback_node", self._fallback_node)

        graph.set_entry_point("precondition_node")

        pipeline = [
            ("precondition_node", "build_node"),
            ("build_node", "call_node"),
            ("call_node", "sanitize_node"),
            ("sanitize_node", "validate_node"),
            ("validate_node", "done_node"),
        ]
        for stage, next_stage in pipeline:
            graph.add_conditional_edges(
                stage,
                self._route_after_stage,
                {"next": next_stage, "fallback": "fallback_node"},
            )

        graph.set_finish_point("done_node")
        graph.set_finish_point("fallback_node")

        return graph.compile()

    def _route_after_stage(self, state: DispatchState) -> str:
        """Any recorded failure ends the pipeline in fallback."""
        return "fallback" if state.failure is not None else "next"

    def _wrap_stage(
        self,
        stage: str,
        stage_fn: Callable[[DispatchState], Dict[str, Any]],
        state: DispatchState,
    ) -> Dict[str, Any]:
        """
        Run a stage with tracing; an exception becomes a recorded failure.

        Tracing failures are silent and non-blocking.
        """
        trace_metadata = TraceMetadata(trace_id=state.trace_id, task=state.task.value)
        span = None
        start_time = time.time()

        try:
            span = self.tracer.start_span(
                name=stage,
                metadata={"stage": stage},
                trace_metadata=trace_metadata,
            )
        except Exception:
            pass

        try:
            update = stage_fn(state)
        except Exception as e:
            logger.error(
                f"Stage {stage} raised for {state.task.value} [trace_id={state.trace_id}]: {e}",
                exc_info=True,
            )
            update = {"failure": FailureKind.INTERNAL_ERROR, "error": f"{type(e).__name__}: {e}"}

        status = "error" if update.get("failure") else "success"
        try:
            self.tracer.end_span(
                span=span,
                status=status,
                metadata={"duration_ms": (time.time() - start_time) * 1000},
            )
        except Exception:
            pass

        update.setdefault("stage", stage)
        return update

    # ─────────────────────────────────────────────────────
    # NODE IMPLEMENTATIONS
    # ─────────────────────────────────────────────────────

    def _precondition_node(self, state: DispatchState) -> Dict[str, Any]:
        return self._wrap_stage("precondition", self._precondition_impl, state)

    def _precondition_impl(self, state: DispatchState) -> Dict[str, Any]:
        """Short-circuit calls that have nothing to ask the model about."""
        reason = unmet_precondition(state.task, state.domain, state.user_input)
        if reason:
            return {"failure": FailureKind.PRECONDITION, "error": reason}
        return {}

    def _build_node(self, state: DispatchState) -> Dict[str, Any]:
        return self._wrap_stage("building", self._build_impl, state)

    def _build_impl(self, state: DispatchState) -> Dict[str, Any]:
        built = self.request_builder.build(state.task, state.domain, state.user_input)
        return {"built": built}

    def _call_node(self, state: DispatchState) -> Dict[str, Any]:
        return self._wrap_stage("calling", self._call_impl, state)

    def _call_impl(self, state: DispatchState) -> Dict[str, Any]:
        profile = TASK_PROFILES[state.task]
        response = self.gateway.call(
            task=state.task.value,
            prompt=state.built.prompt,
            image=state.built.image,
            response_format=profile.response_format,
            reasoning_effort=profile.reasoning_effort,
            trace_id=state.trace_id,
        )

        if not response.is_available:
            detail = (response.metadata or {}).get("error")
            error = response.error_type or "unknown"
            return {
                "response": response,
                "failure": FailureKind.TRANSPORT_ERROR,
                "error": f"{error}: {detail}" if detail else error,
            }

        return {"response": response, "raw_text": response.output or ""}

    def _sanitize_node(self, state: DispatchState) -> Dict[str, Any]:
        return self._wrap_stage("sanitizing", self._sanitize_impl, state)

    def _sanitize_impl(self, state: DispatchState) -> Dict[str, Any]:
        return {"sanitized": sanitize(state.raw_text or "")}

    def _validate_node(self, state: DispatchState) -> Dict[str, Any]:
        return self._wrap_stage("validating", self._validate_impl, state)

    def _validate_impl(self, state: DispatchState) -> Dict[str, Any]:
        result = self.validator.validate(
            state.task,
            state.sanitized,
            known_ids=known_ids_for(state.task, state.domain),
        )
        if isinstance(result, ValidationFailure):
            return {"failure": result.kind, "error": result.detail}
        return {"parsed": result}

    def _done_node(self, state: DispatchState) -> Dict[str, Any]:
        logger.debug(f"{state.task.value} done [trace_id={state.trace_id}]")
        return {"stage": "done", "outcome": "done", "value": state.parsed}

    def _fallback_node(self, state: DispatchState) -> Dict[str, Any]:
        """Substitute the task's fallback and record why."""
        failure = state.failure or FailureKind.INTERNAL_ERROR
        self._record_fallback(state.task, failure, state.stage, state.error, state.raw_text, state.trace_id)
        return {
            "stage": "fallback",
            "outcome": "fallback",
            "failure": failure,
            "value": fallback_for(state.task, failure),
        }

    def _record_fallback(
        self,
        task: TaskKind,
        failure: FailureKind,
        stage: Optional[str],
        error: Optional[str],
        text: Optional[str],
        trace_id: str,
    ) -> None:
        """Log and trace the diagnostic detail; never affects the result."""
        preview = text[:_TEXT_PREVIEW_CHARS] if text else None
        if failure == FailureKind.PRECONDITION:
            logger.debug(f"{task.value} short-circuited: {error} [trace_id={trace_id}]")
        else:
            logger.warning(
                f"{task.value} fell back after {failure.value} at {stage}: {error} "
                f"[trace_id={trace_id}] text={preview!r}"
            )
        try:
            self.tracer.record_event(
                name="fallback_used",
                metadata={"failure": failure.value, "stage": stage, "error": error, "text": preview},
                trace_metadata=TraceMetadata(trace_id=trace_id, task=task.value),
            )
        except Exception:
            pass

    # ─────────────────────────────────────────────────────
    # ENTRY POINTS
    # ─────────────────────────────────────────────────────

    def run(
        self,
        task: TaskKind,
        domain: Optional[DomainSlice] = None,
        user_input: str = "",
        trace_id: Optional[str] = None,
    ) -> TaskResult:
        """
        Execute one task.

        Args:
            task: Which of the nine operations to run
            domain: Read-only domain data for the call
            user_input: Free-text input (voice transcript, question)
            trace_id: Optional trace ID (generated if not provided)

        Returns:
            TaskResult whose value is the validated result or the fallback

        Raises:
            ValueError: task is not a TaskKind value. This is a caller bug,
                not a model failure, so it has no fallback. Every failure
                after this check ends in a fallback result instead.
        """
        trace_id = trace_id or str(uuid4())
        task = TaskKind(task)

        try:
            initial_state = DispatchState(
                task=task,
                domain=domain or DomainSlice(),
                user_input=user_input or "",
                trace_id=trace_id,
            )
            final = self.graph.invoke(initial_state)
            if not isinstance(final, dict):
                final = vars(final)
            return TaskResult(
                task=task,
                value=final.get("value"),
                outcome=final.get("outcome") or "fallback",
                failure=final.get("failure"),
                trace_id=trace_id,
            )
        except Exception as e:
            logger.error(f"Dispatcher failed for {task.value} [trace_id={trace_id}]: {e}", exc_info=True)
            self._record_fallback(task, FailureKind.INTERNAL_ERROR, None, str(e), None, trace_id)
            return TaskResult(
                task=task,
                value=fallback_for(task, FailureKind.INTERNAL_ERROR),
                outcome="fallback",
                failure=FailureKind.INTERNAL_ERROR,
                trace_id=trace_id,
            )

    async def arun(
        self,
        task: TaskKind,
        domain: Optional[DomainSlice] = None,
        user_input: str = "",
        trace_id: Optional[str] = None,
    ) -> TaskResult:
        """Run off the event loop; the blocking model call never stalls it."""
        return await asyncio.to_thread(self.run, task, domain, user_input, trace_id)


def unmet_precondition(task: TaskKind, domain: DomainSlice, user_input: str) -> Optional[str]:
    """Return why a call should be skipped, or None when it can proceed."""
    if TASK_PROFILES[task].needs_image and (domain.image is None or not domain.image.data):
        return "no image supplied"
    if task == TaskKind.UPSELL_SUGGESTION and not any(n and n.strip() for n in domain.cart_item_names):
        return "cart is empty"
    if task == TaskKind.FACE_IDENTIFICATION and not domain.customers_with_descriptor:
        return "no customer has a stored face descriptor"
    if task in (TaskKind.VOICE_COMMAND, TaskKind.SHOP_QUERY) and not (user_input or "").strip():
        return "no user input"
    return None


def known_ids_for(task: TaskKind, domain: DomainSlice) -> Optional[set]:
    """Ids a structured result is allowed to reference."""
    if task == TaskKind.VISUAL_BILLING:
        return domain.product_ids
    if task == TaskKind.FACE_IDENTIFICATION:
        return {c.id for c in domain.customers_with_descriptor}
    return None
