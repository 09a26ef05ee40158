"""
POS assistant layer.

Turns free-form generative-model output into typed results the POS can trust:
request building, one gateway call, fence sanitizing, per-task validation,
and a fallback for every failure.
"""

from assistant.dispatcher import TaskDispatcher
from assistant.domain import Customer, DomainSlice, Product, Sale, SaleItem
from assistant.results import (
    BillingLine,
    HeatmapEntry,
    SmartInsights,
    TaskResult,
    ValidationFailure,
    VoiceIntent,
)
from assistant.service import PosAssistant
from assistant.tasks import FailureKind, TaskKind, TASK_PROFILES

__all__ = [
    "TaskDispatcher",
    "Customer",
    "DomainSlice",
    "Product",
    "Sale",
    "SaleItem",
    "BillingLine",
    "HeatmapEntry",
    "SmartInsights",
    "TaskResult",
    "ValidationFailure",
    "VoiceIntent",
    "PosAssistant",
    "FailureKind",
    "TaskKind",
    "TASK_PROFILES",
]
