from src.models.schemas.queue_routing import JobContext, Queue, QueueRuleResult
from src.services.queue.rules.base import QueueRule


class SystemJobRule(QueueRule):
    """Internal jobs always run on the system lane."""

    name = "system_job"

    def applies(self, context: JobContext) -> bool:
        return context.is_system_job

    def evaluate(self, context: JobContext) -> QueueRuleResult:
        return QueueRuleResult.force(Queue.SYSTEM, "System job")
