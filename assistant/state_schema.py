"""
Dispatcher state schema.

DispatchState is the single source of truth for one dispatcher run. It is
created fresh per call and discarded when the run returns.
"""

from dataclasses import dataclass
from typing import Any, Optional

from assistant.domain import DomainSlice
from assistant.prompting.request_builder import BuiltRequest
from assistant.tasks import FailureKind, TaskKind
from inference import ModelResponse


@dataclass
class DispatchState:
    """
    State of one run: Idle -> Building -> Calling -> Sanitizing -> Validating -> Done | Fallback.

    Invariants:
    - task, domain, user_input and trace_id never change during a run
    - failure is set by the first stage that fails; no later stage runs
    - value is written only by done_node or fallback_node
    """

    # Identity / input
    task: TaskKind
    domain: DomainSlice
    user_input: str
    trace_id: str

    # Progress
    stage: str = "idle"   # idle | precondition | building | calling | sanitizing | validating | done | fallback

    # Stage outputs
    built: Optional[BuiltRequest] = None
    response: Optional[ModelResponse] = None
    raw_text: Optional[str] = None
    sanitized: Optional[str] = None
    parsed: Any = None

    # Outcome
    value: Any = None
    outcome: Optional[str] = None   # done | fallback
    failure: Optional[FailureKind] = None
    error: Optional[str] = None

    def __post_init__(self):
        if not self.trace_id:
            raise ValueError("trace_id must not be empty")
        if not isinstance(self.task, TaskKind):
            raise ValueError(f"task must be a TaskKind, got {self.task!r}")
