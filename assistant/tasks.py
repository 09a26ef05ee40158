"""
Task kinds and their fixed per-task call profile.

The set of tasks is closed: each kind has one input shape, one output shape
and one row in TASK_PROFILES.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from inference import ReasoningEffort

JSON_MIME = "application/json"


class TaskKind(str, Enum):
    MARKET_NEWS = "market_news"
    PRICE_SUGGESTION = "price_suggestion"
    SHOP_QUERY = "shop_query"
    VISUAL_BILLING = "visual_billing"
    VOICE_COMMAND = "voice_command"
    SMART_INSIGHTS = "smart_insights"
    FACE_DESCRIPTION = "face_description"
    FACE_IDENTIFICATION = "face_identification"
    UPSELL_SUGGESTION = "upsell_suggestion"


class FailureKind(str, Enum):
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"
    SHAPE_ERROR = "shape_error"
    EMPTY_RESPONSE = "empty_response"
    PRECONDITION = "precondition"     # no-op short-circuit, not an error
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class TaskProfile:
    """How a task is sent to the service."""

    response_format: Optional[str] = None
    reasoning_effort: Optional[ReasoningEffort] = None
    needs_image: bool = False
    structured: bool = False


TASK_PROFILES: Dict[TaskKind, TaskProfile] = {
    TaskKind.MARKET_NEWS: TaskProfile(),
    TaskKind.PRICE_SUGGESTION: TaskProfile(),
    TaskKind.SHOP_QUERY: TaskProfile(),
    TaskKind.VISUAL_BILLING: TaskProfile(response_format=JSON_MIME, needs_image=True, structured=True),
    # Checkout latency matters more than answer depth here.
    TaskKind.VOICE_COMMAND: TaskProfile(response_format=JSON_MIME, reasoning_effort="minimal", structured=True),
    TaskKind.SMART_INSIGHTS: TaskProfile(response_format=JSON_MIME, structured=True),
    TaskKind.FACE_DESCRIPTION: TaskProfile(needs_image=True),
    TaskKind.FACE_IDENTIFICATION: TaskProfile(response_format=JSON_MIME, needs_image=True, structured=True),
    TaskKind.UPSELL_SUGGESTION: TaskProfile(),
}
