from abc import ABC, abstractmethod

from src.models.schemas.queue_routing import JobContext, QueueRuleResult


class QueueRule(ABC):
    """
    A single routing rule.

    Rules are evaluated in registration order. ``applies`` is a cheap guard;
    a rule that declines is recorded in the trace as not applied and has no
    effect on scoring.
    """

    name: str = ""

    def applies(self, context: JobContext) -> bool:
        return True

    @abstractmethod
    def evaluate(self, context: JobContext) -> QueueRuleResult:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
