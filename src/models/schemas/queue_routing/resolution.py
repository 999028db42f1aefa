"""
Queue Resolution Model

Final routing decision for a job, with the evaluation trace that explains it.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .queue import Queue
from .rule_result import QueueRuleResult


class RuleTraceEntry(BaseModel):
    """One evaluated rule in resolution order."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(..., description="Rule name")
    applied: bool = Field(..., description="Whether the rule's applies() check passed")
    result: Optional[QueueRuleResult] = Field(None, description="Rule result when applied")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule,
            "applied": self.applied,
            "result": self.result.to_dict() if self.result else None,
        }


class QueueResolution(BaseModel):
    """
    Routing decision.

    ``scores`` is only present when the lane was chosen by scoring; a forced
    resolution has ``forced_by`` set and no scores.
    """

    model_config = ConfigDict(frozen=True)

    queue: Queue
    forced_by: Optional[str] = None
    reason: str
    trace: List[RuleTraceEntry] = Field(default_factory=list)
    scores: Optional[Dict[str, int]] = None

    @classmethod
    def forced(
        cls,
        queue: Queue,
        rule_name: str,
        reason: str,
        trace: List[RuleTraceEntry],
    ) -> "QueueResolution":
        return cls(queue=queue, forced_by=rule_name, reason=reason, trace=trace)

    @classmethod
    def from_scores(
        cls,
        queue: Queue,
        scores: Dict[str, int],
        trace: List[RuleTraceEntry],
        reason: str = "Selected by highest score",
    ) -> "QueueResolution":
        return cls(queue=queue, reason=reason, trace=trace, scores=scores)

    @property
    def queue_name(self) -> str:
        return self.queue.value

    def was_forced(self) -> bool:
        return self.forced_by is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queue": self.queue.value,
            "forced_by": self.forced_by,
            "reason": self.reason,
            "scores": self.scores,
            "trace": [entry.to_dict() for entry in self.trace],
        }
