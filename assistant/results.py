"""
Typed results handed back to callers.

Every value here is fully constructed or not constructed at all; a call that
cannot produce one gets its task's fallback instead.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from assistant.tasks import FailureKind, TaskKind

NO_DATA = "No data"


class _Result(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> dict:
        """camelCase dict without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class VoiceIntent(_Result):
    """
    Parsed voice command.

    Invariants:
    - ADD_ITEM carries a non-empty product_id and a quantity > 0
    - CHECKOUT and CLEAR_BILL carry neither
    """

    type: Literal["ADD_ITEM", "CHECKOUT", "CLEAR_BILL"]
    product_id: Optional[str] = None
    quantity: Optional[float] = None


class BillingLine(_Result):
    product_id: str
    quantity: float = Field(1.0, gt=0)


class HeatmapEntry(_Result):
    product_name: str
    score: float = Field(..., ge=0, le=100)


class SmartInsights(_Result):
    stock_prediction: str = NO_DATA
    staff_performance: str = NO_DATA
    sales_heatmap: List[HeatmapEntry] = Field(default_factory=list)

    @field_validator("stock_prediction", "staff_performance")
    @classmethod
    def blank_is_no_data(cls, v):
        """Blank summaries read as 'No data'."""
        return v.strip() if v and v.strip() else NO_DATA


class ValidationFailure(BaseModel):
    """Why a response could not be turned into a result."""

    kind: FailureKind
    detail: str = ""


class TaskResult(BaseModel):
    """
    The outcome of one dispatcher run (the tagged ParsedResult).

    value is either the validated result or the task's documented fallback;
    it is never partially built.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    task: TaskKind
    value: Any = None
    outcome: Literal["done", "fallback"]
    failure: Optional[FailureKind] = None
    trace_id: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.outcome == "fallback"
