"""
Queue Rule Result Model

Outcome of evaluating one queue rule: force a lane, boost or penalize a lane's
score, or skip.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .queue import Queue


class RuleResultKind(str, Enum):
    FORCE = "force"
    BOOST = "boost"
    PENALIZE = "penalize"
    SKIP = "skip"


class QueueRuleResult(BaseModel):
    """
    Immutable rule outcome. Build instances through the class-method
    constructors; ``magnitude`` is always non-negative and the sign comes from
    ``kind``.
    """

    model_config = ConfigDict(frozen=True)

    kind: RuleResultKind
    queue: Optional[Queue] = Field(None, description="Forced or targeted lane")
    magnitude: int = Field(0, ge=0, description="Unsigned score delta")
    reason: Optional[str] = None

    @model_validator(mode="after")
    def validate_variant(self):
        if self.kind == RuleResultKind.SKIP:
            if self.queue is not None or self.magnitude:
                raise ValueError("skip results carry no queue or magnitude")
        elif self.queue is None:
            raise ValueError(f"{self.kind.value} results require a queue")
        if self.kind == RuleResultKind.FORCE and self.magnitude:
            raise ValueError("force results carry no magnitude")
        return self

    @classmethod
    def force(cls, queue: Queue, reason: Optional[str] = None) -> "QueueRuleResult":
        return cls(kind=RuleResultKind.FORCE, queue=queue, reason=reason)

    @classmethod
    def boost(cls, queue: Queue, amount: int, reason: Optional[str] = None) -> "QueueRuleResult":
        return cls(kind=RuleResultKind.BOOST, queue=queue, magnitude=abs(amount), reason=reason)

    @classmethod
    def penalize(cls, queue: Queue, amount: int, reason: Optional[str] = None) -> "QueueRuleResult":
        return cls(kind=RuleResultKind.PENALIZE, queue=queue, magnitude=abs(amount), reason=reason)

    @classmethod
    def skip(cls, reason: Optional[str] = None) -> "QueueRuleResult":
        return cls(kind=RuleResultKind.SKIP, reason=reason)

    @property
    def forced_queue(self) -> Optional[Queue]:
        return self.queue if self.kind == RuleResultKind.FORCE else None

    @property
    def target_queue(self) -> Optional[Queue]:
        if self.kind in (RuleResultKind.BOOST, RuleResultKind.PENALIZE):
            return self.queue
        return None

    @property
    def score_adjustment(self) -> int:
        if self.kind == RuleResultKind.BOOST:
            return self.magnitude
        if self.kind == RuleResultKind.PENALIZE:
            return -self.magnitude
        return 0

    def is_forced(self) -> bool:
        return self.kind == RuleResultKind.FORCE

    def has_effect(self) -> bool:
        return self.kind != RuleResultKind.SKIP

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "queue": self.queue.value if self.queue else None,
            "score_adjustment": self.score_adjustment,
            "reason": self.reason,
        }
