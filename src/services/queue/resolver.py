"""
Queue Resolver

Routes a job to exactly one execution lane by evaluating an ordered list of
rules. A rule may force a lane (first force wins and stops evaluation), adjust
a lane's score, or skip. Without a force the highest scoring lane is chosen.
"""

from typing import Dict, Iterable, List, Optional, Union

from src.models.schemas.queue_routing import (
    JobContext,
    Queue,
    QueueResolution,
    QueueRuleResult,
    RuleTraceEntry,
)
from src.services.queue.exceptions import InvalidRuleResultError, UnknownQueueError
from src.services.queue.rules.base import QueueRule
from src.utils.logging import get_logger

logger = get_logger(__name__)


def parse_queue(value: Union[Queue, str]) -> Queue:
    """Convert a lane name to a Queue, raising UnknownQueueError for unknown names."""
    if isinstance(value, Queue):
        return value
    try:
        return Queue(value)
    except ValueError as e:
        raise UnknownQueueError(str(value)) from e


class QueueResolver:
    """
    Rule-based queue resolver.

    Holds only its registered rules; scores and trace are allocated per
    ``resolve`` call so one instance can be shared freely.
    """

    def __init__(
        self,
        rules: Optional[Iterable[QueueRule]] = None,
        default_queue: Union[Queue, str] = Queue.DEFAULT,
        debug_mode: bool = False,
    ):
        self._rules: List[QueueRule] = list(rules or [])
        self.default_queue = parse_queue(default_queue)
        self.debug_mode = debug_mode

    @property
    def rules(self) -> List[QueueRule]:
        """Registered rules in evaluation order (a copy)."""
        return list(self._rules)

    def add_rule(self, rule: QueueRule) -> "QueueResolver":
        self._rules.append(rule)
        return self

    def enable_debug_mode(self) -> "QueueResolver":
        self.debug_mode = True
        return self

    def resolve(self, context: JobContext) -> QueueResolution:
        scores: Dict[Queue, int] = {queue: 0 for queue in Queue}
        trace: List[RuleTraceEntry] = []

        for rule in self._rules:
            if not rule.applies(context):
                trace.append(RuleTraceEntry(rule=rule.name, applied=False))
                continue

            result = rule.evaluate(context)
            if not isinstance(result, QueueRuleResult):
                raise InvalidRuleResultError(rule.name, result)

            trace.append(RuleTraceEntry(rule=rule.name, applied=True, result=result))

            if result.is_forced():
                resolution = QueueResolution.forced(
                    queue=result.forced_queue,
                    rule_name=rule.name,
                    reason=result.reason or f"Forced by {rule.name}",
                    trace=trace,
                )
                self._log_resolution(context, resolution)
                return resolution

            if result.target_queue is not None:
                scores[result.target_queue] += result.score_adjustment

        resolution = QueueResolution.from_scores(
            queue=self._select_by_score(scores),
            scores={queue.value: score for queue, score in scores.items()},
            trace=trace,
        )
        self._log_resolution(context, resolution)
        return resolution

    def resolve_queue_name(self, context: JobContext) -> str:
        return self.resolve(context).queue.value

    def _select_by_score(self, scores: Dict[Queue, int]) -> Queue:
        # Ties: default queue if tied, else first tied queue in declaration order
        best = max(scores.values())
        tied = [queue for queue in Queue if scores[queue] == best]
        if self.default_queue in tied:
            return self.default_queue
        return tied[0]

    def _log_resolution(self, context: JobContext, resolution: QueueResolution) -> None:
        if not self.debug_mode:
            return

        logger.debug(
            f"Resolved {context.job_name} to queue '{resolution.queue.value}': {resolution.reason}",
            extra={
                "job_class": context.job_class,
                "queue": resolution.queue.value,
                "forced_by": resolution.forced_by,
                "rules_evaluated": len(resolution.trace),
            },
        )
