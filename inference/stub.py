from typing import Dict, Iterable, List, Optional

from .base import ModelBackend
from .types import ModelRequest, ModelResponse

# Canned outputs per task, shaped the way the real service answers.
_DEFAULT_OUTPUTS: Dict[str, str] = {
    "market_news": "Stub headline: grocery prices hold steady this week.",
    "price_suggestion": "Stub headline.\nSUGGESTION: Increase Dairy prices by 2%",
    "shop_query": "This is a stubbed response.",
    "visual_billing": "[]",
    "voice_command": '{"type": "CHECKOUT"}',
    "smart_insights": (
        '{"stockPrediction": "No stockout risk detected.", '
        '"staffPerformance": "No standout employee.", "salesHeatmap": []}'
    ),
    "face_description": "Stub customer, adult",
    "face_identification": '{"matchedId": null}',
    "upsell_suggestion": "Fresh bread",
}


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    This backend is fast, deterministic, and never fails silently.
    Outputs can be scripted per task; every request is recorded so tests
    can assert on what was (or was not) sent.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        fail_tasks: Optional[Iterable[str]] = None,
    ):
        self.responses = dict(_DEFAULT_OUTPUTS)
        self.responses.update(responses or {})
        self.fail_tasks = set(fail_tasks or ())
        self.requests: List[ModelRequest] = []

    def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Generate a deterministic response based on task type.

        Args:
            request: ModelRequest with task, prompt, and optional parameters

        Returns:
            ModelResponse with the scripted output for the task
        """
        self.requests.append(request)

        if request.task in self.fail_tasks:
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                metadata={"backend": "stub", "trace_id": request.trace_id},
            )

        output = self.responses.get(request.task)
        if output is None:
            output = f"Default stub output for task: {request.task}"

        return ModelResponse(
            status="success",
            output=output,
            metadata={"backend": "stub", "trace_id": request.trace_id},
        )
