"""
Response validation: sanitized text in, typed result or ValidationFailure out.

Nothing here trusts the parse. Each task has its own shape check, and only
the repairs listed per task are applied locally; any other mismatch is a
SHAPE_ERROR. No exception leaves validate().
"""

import json
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Set, Union

from pydantic import ValidationError

from assistant.results import (
    NO_DATA,
    BillingLine,
    HeatmapEntry,
    SmartInsights,
    ValidationFailure,
    VoiceIntent,
)
from assistant.tasks import FailureKind, TaskKind, TASK_PROFILES

logger = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 100.0


class ShapeMismatch(ValueError):
    """Raised inside a shape check; converted to SHAPE_ERROR by validate()."""


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a quantity or score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _positive_quantity(value: Any, field: str = "quantity") -> float:
    if not _is_number(value) or value <= 0:
        raise ShapeMismatch(f"{field} must be a positive number, got {value!r}")
    return float(value)


def _non_empty_str(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ShapeMismatch(f"{field} must be a non-empty string, got {value!r}")
    return value.strip()


def _check_voice_command(data: Any, known_ids: Optional[Set[str]]) -> VoiceIntent:
    if not isinstance(data, dict):
        raise ShapeMismatch("voice command must be an object")

    intent = data.get("type")
    if intent == "ADD_ITEM":
        return VoiceIntent(
            type="ADD_ITEM",
            product_id=_non_empty_str(data.get("productId"), "productId"),
            quantity=_positive_quantity(data.get("quantity")),
        )
    if intent in ("CHECKOUT", "CLEAR_BILL"):
        return VoiceIntent(type=intent)

    raise ShapeMismatch(f"unknown intent type {intent!r}")


def _check_visual_billing(data: Any, known_ids: Optional[Set[str]]) -> List[BillingLine]:
    if not isinstance(data, list):
        raise ShapeMismatch("visual billing result must be an array")

    lines: List[BillingLine] = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ShapeMismatch(f"billing entry must be an object, got {entry!r}")
        product_id = _non_empty_str(entry.get("productId"), "productId")
        # Unknown products are dropped before their quantity is looked at
        if known_ids is not None and product_id not in known_ids:
            logger.debug(f"Dropping billing entry for unknown product {product_id!r}")
            continue

        quantity = entry.get("quantity")
        quantity = 1.0 if quantity is None else _positive_quantity(quantity)
        lines.append(BillingLine(product_id=product_id, quantity=quantity))

    return lines


def _check_face_identification(data: Any, known_ids: Optional[Set[str]]) -> Optional[str]:
    if not isinstance(data, dict) or "matchedId" not in data:
        raise ShapeMismatch("face identification result must contain matchedId")

    matched = data["matchedId"]
    if isinstance(matched, str) and known_ids is not None and matched in known_ids:
        return matched
    return None


def _heatmap_entry(entry: Any) -> Optional[HeatmapEntry]:
    if not isinstance(entry, dict):
        return None
    name = entry.get("productName")
    score = entry.get("score")
    if not isinstance(name, str) or not name.strip() or not _is_number(score):
        return None
    return HeatmapEntry(product_name=name.strip(), score=min(max(float(score), SCORE_MIN), SCORE_MAX))


def _check_smart_insights(data: Any, known_ids: Optional[Set[str]]) -> SmartInsights:
    if not isinstance(data, dict):
        raise ShapeMismatch("smart insights result must be an object")

    def text_field(name: str) -> str:
        value = data.get(name)
        return value if isinstance(value, str) else NO_DATA

    heatmap_raw = data.get("salesHeatmap")
    heatmap = []
    if isinstance(heatmap_raw, list):
        heatmap = [e for e in (_heatmap_entry(raw) for raw in heatmap_raw) if e is not None]

    return SmartInsights(
        stock_prediction=text_field("stockPrediction"),
        staff_performance=text_field("staffPerformance"),
        sales_heatmap=heatmap,
    )


_SHAPE_CHECKS: Dict[TaskKind, Callable[[Any, Optional[Set[str]]], Any]] = {
    TaskKind.VOICE_COMMAND: _check_voice_command,
    TaskKind.VISUAL_BILLING: _check_visual_billing,
    TaskKind.FACE_IDENTIFICATION: _check_face_identification,
    TaskKind.SMART_INSIGHTS: _check_smart_insights,
}


class ResponseValidator:
    """
    Validate sanitized model text against a task's expected shape.

    known_ids is the set of product ids (VISUAL_BILLING) or descriptor-bearing
    customer ids (FACE_IDENTIFICATION) the result may refer to.
    """

    def validate(
        self,
        task: TaskKind,
        text: Optional[str],
        known_ids: Optional[Set[str]] = None,
    ) -> Union[Any, ValidationFailure]:
        stripped = (text or "").strip()
        if not stripped:
            return ValidationFailure(kind=FailureKind.EMPTY_RESPONSE, detail="no text after trimming")

        if not TASK_PROFILES[task].structured:
            return stripped

        try:
            data = json.loads(stripped)
        except (ValueError, RecursionError) as e:
            return ValidationFailure(kind=FailureKind.PARSE_ERROR, detail=str(e))

        try:
            return _SHAPE_CHECKS[task](data, known_ids)
        except (ShapeMismatch, ValidationError, OverflowError) as e:
            return ValidationFailure(kind=FailureKind.SHAPE_ERROR, detail=str(e))
