"""
The single fallback table.

Every task has one documented value returned when any pipeline stage fails
or a precondition short-circuits the call. Narrative tasks that distinguish
"the service answered with nothing" from "the call failed" carry a second
entry in EMPTY_RESPONSE_FALLBACKS.
"""

from typing import Any, Callable, Dict, Optional

from assistant.results import NO_DATA, SmartInsights
from assistant.tasks import FailureKind, TaskKind

UNAVAILABLE = "Unavailable"

# Factories, so no two calls share a mutable fallback value.
FALLBACKS: Dict[TaskKind, Callable[[], Any]] = {
    TaskKind.MARKET_NEWS: lambda: "Market news currently unavailable.",
    TaskKind.PRICE_SUGGESTION: lambda: "Could not fetch price variation suggestion.",
    TaskKind.SHOP_QUERY: lambda: "Sorry, I'm having trouble connecting to my brain right now.",
    TaskKind.VISUAL_BILLING: lambda: [],
    TaskKind.VOICE_COMMAND: lambda: None,
    TaskKind.SMART_INSIGHTS: lambda: SmartInsights(
        stock_prediction=UNAVAILABLE,
        staff_performance=UNAVAILABLE,
        sales_heatmap=[],
    ),
    TaskKind.FACE_DESCRIPTION: lambda: "Analysis unavailable",
    TaskKind.FACE_IDENTIFICATION: lambda: None,
    TaskKind.UPSELL_SUGGESTION: lambda: None,
}

EMPTY_RESPONSE_FALLBACKS: Dict[TaskKind, Callable[[], Any]] = {
    TaskKind.PRICE_SUGGESTION: lambda: "Could not fetch suggestion.",
    TaskKind.SHOP_QUERY: lambda: "I couldn't generate an answer.",
    TaskKind.SMART_INSIGHTS: lambda: SmartInsights(
        stock_prediction=NO_DATA,
        staff_performance=NO_DATA,
        sales_heatmap=[],
    ),
    TaskKind.FACE_DESCRIPTION: lambda: "Customer detected",
}


def fallback_for(task: TaskKind, failure: Optional[FailureKind] = None) -> Any:
    """Return a fresh fallback value for a task and failure kind."""
    if failure == FailureKind.EMPTY_RESPONSE and task in EMPTY_RESPONSE_FALLBACKS:
        return EMPTY_RESPONSE_FALLBACKS[task]()
    return FALLBACKS[task]()
